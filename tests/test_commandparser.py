import unittest

from studentcms.analytics.analytics import SortKey, SortOrder
from studentcms.cli.commandparser import (FieldMode, parse_confirmation, parse_fields, parse_show, split_command,
                                          title_case, validate_id, validate_mark)
from studentcms.elements.record import RecordPatch, StudentRecord
from studentcms.utils.utils import ValidationError


class TestHelpers(unittest.TestCase):

    def test_split_command(self):
        self.assertEqual(split_command("  insert   ID=2000001 "), ("INSERT", "ID=2000001"))
        self.assertEqual(split_command("undo"), ("UNDO", ""))
        self.assertEqual(split_command("   "), ("", ""))

    def test_title_case(self):
        self.assertEqual(title_case("ada LOVELACE"), "Ada Lovelace")
        self.assertEqual(title_case("computer  science"), "Computer  Science")
        self.assertEqual(title_case("o'neil mcDONALD"), "O'neil Mcdonald")

    def test_validate_id(self):
        self.assertTrue(validate_id("2000001"))
        for bad in ("1000001", "200001", "20000011", "200000a", ""):
            self.assertFalse(validate_id(bad), bad)

    def test_validate_mark(self):
        for good in ("90", "90.5", ".5", "+1", "-0", "100.0"):
            self.assertTrue(validate_mark(good), good)
        for bad in ("5.", "abc", "1.2.3", "", "+", "1e2"):
            self.assertFalse(validate_mark(bad), bad)

    def test_parse_confirmation(self):
        self.assertTrue(parse_confirmation(" y "))
        self.assertFalse(parse_confirmation("N"))
        self.assertIsNone(parse_confirmation("yes"))


class TestParseFields(unittest.TestCase):

    def test_insert_all_fields(self):
        f = parse_fields("ID=2000001 NAME=ada lovelace PROGRAMME=cs MARK=90", FieldMode.INSERT)
        self.assertEqual(f.to_record(), StudentRecord(2000001, "Ada Lovelace", "Cs", 90.0))

    def test_insert_defaults(self):
        f = parse_fields("ID=2000001", FieldMode.INSERT)
        self.assertEqual(f.to_record(), StudentRecord(2000001, "", "", 0.0))

    def test_keys_are_case_insensitive_and_any_order(self):
        f = parse_fields("mark=75 id=2000002", FieldMode.UPDATE)
        self.assertEqual(f.id, 2000002)
        self.assertEqual(f.to_patch(), RecordPatch(mark=75.0))

    def test_value_may_contain_key_words(self):
        f = parse_fields("ID=2000001 NAME=Mark Said PROGRAMME=Id Studies", FieldMode.INSERT)
        self.assertEqual(f.name, "Mark Said")
        self.assertEqual(f.programme, "Id Studies")

    def test_values_are_trimmed(self):
        f = parse_fields("ID=  2000001   NAME=  bob   ", FieldMode.INSERT)
        self.assertEqual((f.id, f.name), (2000001, "Bob"))

    def test_update_needs_an_optional_field(self):
        with self.assertRaisesRegex(ValidationError, "At least one"):
            parse_fields("ID=2000001", FieldMode.UPDATE)
        with self.assertRaisesRegex(ValidationError, "At least one"):
            parse_fields("ID=2000001 NAME=", FieldMode.UPDATE)

    def test_id_only(self):
        self.assertEqual(parse_fields("ID=2000001", FieldMode.ID_ONLY).id, 2000001)
        with self.assertRaisesRegex(ValidationError, "Only ID allowed"):
            parse_fields("ID=2000001 NAME=x", FieldMode.ID_ONLY)

    def test_rejections(self):
        cases = {
            "": "Missing required ID",
            "ID=": "Missing required ID",
            "NAME=bob": "Missing required ID",
            "ID=1234567": "7 digits",
            "ID=2000001 ID=2000002": "Duplicate field",
            "AGE=3 ID=2000001": "Unknown field",
            "NAME": "Unknown field",
            "ID =2000001": "No space allowed",
            "ID 2000001": "Missing '='",
            "ID=2000001 MARK=abc": "numeric",
            "ID=2000001 MARK=100.1": "between 0 - 100",
            "ID=2000001 MARK=-1": "between 0 - 100",
            "ID=2000001 NAME=" + "a" * 100: "Name is too long",
            "ID=2000001 PROGRAMME=" + "a" * 100: "Programme is too long",
        }
        for text, message in cases.items():
            with self.assertRaisesRegex(ValidationError, message, msg=text):
                parse_fields(text, FieldMode.INSERT)

    def test_max_length_accepted(self):
        f = parse_fields("ID=2000001 NAME=" + "a" * 99, FieldMode.INSERT)
        self.assertEqual(len(f.name), 99)


class TestParseShow(unittest.TestCase):

    def test_show_all(self):
        self.assertEqual(parse_show("all").kind, "all")

    def test_sorted(self):
        req = parse_show("ALL SORT BY mark desc")
        self.assertEqual((req.kind, req.sort_key, req.order), ("sorted", SortKey.MARK, SortOrder.DESC))
        req = parse_show("ALL SORT BY ID")
        self.assertEqual((req.sort_key, req.order), (SortKey.ID, SortOrder.ASC))

    def test_summary(self):
        self.assertIsNone(parse_show("SUMMARY").programme)
        self.assertEqual(parse_show("SUMMARY PROGRAMME=computer science").programme, "Computer Science")
        self.assertEqual(parse_show("summary programme=  cs  ").programme, "Cs")

    def test_rejections(self):
        cases = {
            "": "valid SHOW",
            "NONE": "Unknown SHOW",
            "ALL BY": "Invalid SHOW ALL format",
            "ALL SORT ID": "Expected 'SORT BY'",
            "ALL SORT BY": "Missing sort field",
            "ALL SORT BY NAME": "Invalid sort field",
            "ALL SORT BY ID UP": "Invalid sort order",
            "ALL SORT BY ID ASC X": "trailing",
            "SUMMARY PROGRAMME": "key=value",
            "SUMMARY PROGRAMME =Cs": "No space allowed",
            "SUMMARY NAME=x": "Unknown filter key 'NAME'",
        }
        for text, message in cases.items():
            with self.assertRaisesRegex(ValidationError, message, msg=text):
                parse_show(text)


if __name__ == "__main__":
    unittest.main()
