"""
Parsing of the textual command surface.

Commands are case-insensitive keywords followed by arguments. Record
commands take ``KEY=value`` pairs (``ID``, ``NAME``, ``PROGRAMME``, ``MARK``);
a value runs until the next recognised key or the end of the line and is
trimmed. Every rejection raises ``ValidationError`` with the message shown to
the user.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from studentcms.analytics.analytics import SortKey, SortOrder
from studentcms.elements.record import RecordPatch, StudentRecord
from studentcms.utils.config import MAX_MARK, MAX_NAME, MAX_PROGRAMME, MIN_MARK
from studentcms.utils.utils import ValidationError

KEYS = ("ID", "NAME", "PROGRAMME", "MARK")
_MARK_RE = re.compile(r"[+-]?[0-9]*\.?[0-9]+")
_NEXT_KEY_RE = re.compile(r"(?<=\s)(?:ID|NAME|PROGRAMME|MARK)\s*=", re.IGNORECASE)


class FieldMode(Enum):
    ID_ONLY = "id_only"
    INSERT = "insert"
    UPDATE = "update"


@dataclass
class CommandFields:
    id: int
    name: Optional[str] = None
    programme: Optional[str] = None
    mark: Optional[float] = None

    def to_record(self) -> StudentRecord:
        return StudentRecord(
            id=self.id,
            name=self.name or "",
            programme=self.programme or "",
            mark=self.mark if self.mark is not None else 0.0,
        )

    def to_patch(self) -> RecordPatch:
        return RecordPatch(name=self.name, programme=self.programme, mark=self.mark)


@dataclass
class ShowRequest:
    kind: str  # "all" | "sorted" | "summary"
    sort_key: Optional[SortKey] = None
    order: SortOrder = SortOrder.ASC
    programme: Optional[str] = None


def split_command(line: str) -> Tuple[str, str]:
    parts = line.strip().split(None, 1)
    if not parts:
        return "", ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    return parts[0].upper(), rest


def title_case(text: str) -> str:
    out = []
    capitalize_next = True
    for ch in text:
        if ch.isspace():
            capitalize_next = True
            out.append(ch)
        elif capitalize_next:
            out.append(ch.upper())
            capitalize_next = False
        else:
            out.append(ch.lower())
    return "".join(out)


def validate_id(text: str) -> bool:
    return len(text) == 7 and text[0] == "2" and all(c in "0123456789" for c in text)


def validate_mark(text: str) -> bool:
    return _MARK_RE.fullmatch(text) is not None


def parse_confirmation(text: str) -> Optional[bool]:
    answer = text.strip().upper()
    if answer == "Y":
        return True
    if answer == "N":
        return False
    return None


def _key_at(text: str, pos: int) -> Optional[str]:
    for key in KEYS:
        end = pos + len(key)
        if text[pos:end].upper() == key and end < len(text) and (text[end] == "=" or text[end].isspace()):
            return key
    return None


def _parse_value(key: str, value: str, fields: Dict[str, object]):
    if key == "ID":
        if not value:
            raise ValidationError("Missing required ID.")
        if not validate_id(value):
            raise ValidationError("Invalid command. ID must be 7 digits starting with '2'.")
        fields["id"] = int(value)
    elif key == "NAME":
        if value:
            if len(value) > MAX_NAME:
                raise ValidationError(f"Invalid command. Name is too long (Max {MAX_NAME} characters).")
            fields["name"] = title_case(value)
    elif key == "PROGRAMME":
        if value:
            if len(value) > MAX_PROGRAMME:
                raise ValidationError(f"Invalid command. Programme is too long (Max {MAX_PROGRAMME} characters).")
            fields["programme"] = title_case(value)
    elif key == "MARK":
        if value:
            if not validate_mark(value):
                raise ValidationError("Invalid command. Mark must be numeric.")
            mark = float(value)
            if mark < MIN_MARK or mark > MAX_MARK:
                raise ValidationError("Invalid command. Mark must be between 0 - 100.")
            fields["mark"] = mark


def parse_fields(text: str, mode: FieldMode) -> CommandFields:
    fields: Dict[str, object] = {}
    seen = set()
    pos = 0
    text = text.strip()
    while pos < len(text):
        key = _key_at(text, pos)
        if key is None:
            raise ValidationError("Invalid command. Unknown field or missing '='.")
        if key in seen:
            raise ValidationError("Invalid command. Duplicate field.")
        seen.add(key)

        after = pos + len(key)
        eq = after
        while eq < len(text) and text[eq].isspace():
            eq += 1
        if eq >= len(text) or text[eq] != "=":
            raise ValidationError("Invalid command. Missing '='.")
        if eq > after:
            raise ValidationError("Invalid command. No space allowed before '='.")
        if mode is FieldMode.ID_ONLY and key != "ID":
            raise ValidationError("Invalid command. Only ID allowed.")

        start = eq + 1
        m = _NEXT_KEY_RE.search(text, start)
        end = m.start() if m else len(text)
        _parse_value(key, text[start:end].strip(), fields)
        pos = end

    if "id" not in fields:
        raise ValidationError("Missing required ID.")
    parsed = CommandFields(
        id=fields["id"],
        name=fields.get("name"),
        programme=fields.get("programme"),
        mark=fields.get("mark"),
    )
    if mode is FieldMode.UPDATE and parsed.to_patch().is_empty():
        raise ValidationError("At least one of NAME, PROGRAMME, or MARK must be provided for UPDATE.")
    return parsed


def _parse_summary_filter(rest: str) -> Optional[str]:
    rest = rest.strip()
    if not rest:
        return None
    eq = rest.find("=")
    if eq < 0:
        raise ValidationError("Invalid filter format. Use key=value.")
    if eq > 0 and rest[eq - 1] in " \t":
        raise ValidationError("Invalid command. No space allowed before '='.")
    key = rest[:eq]
    value = rest[eq + 1:].strip()
    if key.upper() != "PROGRAMME":
        raise ValidationError(f"Unknown filter key '{key}'.")
    if len(value) > MAX_PROGRAMME:
        raise ValidationError("Programme too long.")
    return title_case(value)


def parse_show(text: str) -> ShowRequest:
    tokens = text.split()
    if not tokens:
        raise ValidationError("Enter a valid SHOW command.")
    head = tokens[0].upper()

    if head == "ALL":
        if len(tokens) == 1:
            return ShowRequest(kind="all")
        if tokens[1].upper() != "SORT":
            raise ValidationError("Invalid SHOW ALL format.")
        if len(tokens) < 3 or tokens[2].upper() != "BY":
            raise ValidationError("Expected 'SORT BY'.")
        if len(tokens) < 4:
            raise ValidationError("Missing sort field (ID or MARK).")
        try:
            sort_key = SortKey(tokens[3].upper())
        except ValueError:
            raise ValidationError("Invalid sort field. Use ID or MARK.")
        order = SortOrder.ASC
        if len(tokens) >= 5:
            try:
                order = SortOrder(tokens[4].upper())
            except ValueError:
                raise ValidationError("Invalid sort order. Use ASC or DESC.")
            if len(tokens) > 5:
                raise ValidationError("Invalid trailing input.")
        return ShowRequest(kind="sorted", sort_key=sort_key, order=order)

    if head == "SUMMARY":
        rest = text.strip()[len(tokens[0]):]
        return ShowRequest(kind="summary", programme=_parse_summary_filter(rest))

    raise ValidationError("Unknown SHOW command.")
