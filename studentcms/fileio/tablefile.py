"""
Tab-separated table file used for the primary database and its backup.

Layout::

    Database Name: P4_1-CMS
    Authors: P4-1
    <blank line>
    Table Name: StudentRecords
    ID<TAB>Name<TAB>Programme<TAB>Mark
    2000001<TAB>Ada<TAB>Cs<TAB>90.0
    ...

Lines are separated by a single ``\\n``. On load any line that contains one
of the header markers is skipped, not just lines equal to them, so a record
whose name happens to contain e.g. ``Authors: P4-1`` is dropped on reload.
Save compares whole files byte for byte, so the header must be written
exactly as above.
"""
import logging
import os
import re
import tempfile
from typing import Iterable, List

from studentcms.elements.record import StudentRecord
from studentcms.utils.config import AUTHORS, COLUMNS, DATABASE_NAME, TABLE_NAME
from studentcms.utils.utils import CMSIOError

logger = logging.getLogger(__name__)

HEADER_MARKERS = (
    f"Database Name: {DATABASE_NAME}",
    f"Authors: {AUTHORS}",
    f"Table Name: {TABLE_NAME}",
    "\t".join(COLUMNS),
)
HEADER = (
    f"{HEADER_MARKERS[0]}\n"
    f"{HEADER_MARKERS[1]}\n"
    "\n"
    f"{HEADER_MARKERS[2]}\n"
    f"{HEADER_MARKERS[3]}\n"
)
ENCODING = "utf-8"

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _leading_int(text: str) -> int:
    m = _INT_PREFIX.match(text)
    return int(m.group(1)) if m else 0


def _leading_float(text: str) -> float:
    m = _FLOAT_PREFIX.match(text)
    return float(m.group(1)) if m else 0.0


def is_header_line(line: str) -> bool:
    return any(marker in line for marker in HEADER_MARKERS)


def parse_line(line: str) -> StudentRecord:
    fields = line.split("\t", 3)
    fields += [""] * (4 - len(fields))
    id_s, name, programme, mark_s = fields
    # a fourth tab and anything after it belongs to no column
    mark_s = mark_s.split("\t", 1)[0]
    return StudentRecord(
        id=_leading_int(id_s) if id_s else 0,
        name=name,
        programme=programme,
        mark=_leading_float(mark_s) if mark_s else 0.0,
    )


class TableFile:

    def parse(self, lines: Iterable[str]) -> List[StudentRecord]:
        records: List[StudentRecord] = []
        for line in lines:
            line = line.rstrip("\r\n")
            if not line or is_header_line(line):
                continue
            records.append(parse_line(line))
        return records

    def serialise(self, records: Iterable[StudentRecord]) -> str:
        return HEADER + "".join(r.to_line() for r in records)

    def read_records(self, path: str) -> List[StudentRecord]:
        try:
            with open(path, "r", encoding=ENCODING, newline="") as f:
                records = self.parse(f)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read %s: %s", path, e)
            raise CMSIOError(f"Could not open file \"{path}\".") from e
        logger.info("Read %d records from %s", len(records), path)
        return records

    def read_bytes(self, path: str) -> bytes:
        if not os.path.exists(path):
            return b""
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error("Could not read %s: %s", path, e)
            raise CMSIOError(f"Could not read file \"{path}\" for comparison.") from e

    def write_backup(self, path: str, content: bytes):
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error("Could not write backup %s: %s", path, e)
            raise CMSIOError(f"Error writing the backup file \"{os.path.basename(path)}\". Nothing was saved.") from e
        logger.info("Wrote backup %s (%d bytes)", path, len(content))

    def write_primary(self, path: str, content: bytes):
        # write to temp then replace so a failed write never truncates the primary
        directory = os.path.dirname(path) or "."
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(prefix=".cms_", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.replace(tmp, path)
            tmp = None
        except OSError as e:
            logger.error("Could not write %s: %s", path, e)
            raise CMSIOError("Error saving the database file.") from e
        finally:
            if tmp is not None and os.path.exists(tmp):
                os.remove(tmp)
        logger.info("Wrote %s (%d bytes)", path, len(content))
