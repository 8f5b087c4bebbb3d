import unittest

from studentcms.elements.record import RecordPatch, StudentRecord
from studentcms.elements.studenttable import StudentTable
from studentcms.utils.utils import DuplicateIdError, RecordNotFoundError


class TestStudentTable(unittest.TestCase):

    def setUp(self):
        self.table = StudentTable()
        for rid, name in [(2000001, "Ada"), (2000002, "Bob"), (2000003, "Cy")]:
            self.table.insert_row(StudentRecord(rid, name, "Cs", 50.0))

    def assertCoherent(self):
        ids = [r.id for r in self.table.rows]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(set(self.table.index), set(ids))
        for r in self.table.rows:
            self.assertIs(self.table.index[r.id], r)

    def test_insert_appends_at_tail(self):
        self.table.insert_row(StudentRecord(2000004, "Di", "Ee", 10.0))
        self.assertEqual([r.id for r in self.table], [2000001, 2000002, 2000003, 2000004])
        self.assertCoherent()

    def test_insert_duplicate_raises(self):
        with self.assertRaises(DuplicateIdError) as ctx:
            self.table.insert_row(StudentRecord(2000002, "Other"))
        self.assertEqual(ctx.exception.record_id, 2000002)
        self.assertEqual(len(self.table), 3)

    def test_insert_at_position(self):
        self.table.insert_row(StudentRecord(2000009, "Zed"), position=1)
        self.assertEqual([r.id for r in self.table], [2000001, 2000009, 2000002, 2000003])
        self.assertCoherent()

    def test_update_is_partial_and_keeps_position(self):
        old, new = self.table.update_row(2000002, RecordPatch(mark=75.0))
        self.assertEqual(old, StudentRecord(2000002, "Bob", "Cs", 50.0))
        self.assertEqual(new, StudentRecord(2000002, "Bob", "Cs", 75.0))
        self.assertEqual([r.id for r in self.table], [2000001, 2000002, 2000003])
        self.assertEqual(self.table.get(2000002).mark, 75.0)
        self.assertCoherent()

    def test_update_can_set_empty_name(self):
        self.table.update_row(2000001, RecordPatch(name=""))
        self.assertEqual(self.table.get(2000001).name, "")

    def test_update_missing_raises(self):
        with self.assertRaises(RecordNotFoundError):
            self.table.update_row(2999999, RecordPatch(mark=1.0))

    def test_delete_returns_position(self):
        pos, row = self.table.delete_row(2000002)
        self.assertEqual(pos, 1)
        self.assertEqual(row.name, "Bob")
        self.assertIsNone(self.table.get(2000002))
        self.assertCoherent()

    def test_delete_missing_raises(self):
        with self.assertRaises(RecordNotFoundError):
            self.table.delete_row(2999999)

    def test_get_returns_copy(self):
        rec = self.table.get(2000001)
        rec.name = "Changed"
        self.assertEqual(self.table.get(2000001).name, "Ada")

    def test_load_rows_skips_duplicates(self):
        skipped = self.table.load_rows([StudentRecord(2000005, "E"), StudentRecord(2000005, "F"),
                                        StudentRecord(2000006, "G")])
        self.assertEqual(skipped, 1)
        self.assertEqual([(r.id, r.name) for r in self.table], [(2000005, "E"), (2000006, "G")])
        self.assertCoherent()

    def test_clear(self):
        self.table.clear()
        self.assertEqual(len(self.table), 0)
        self.assertEqual(self.table.index, {})


if __name__ == "__main__":
    unittest.main()
