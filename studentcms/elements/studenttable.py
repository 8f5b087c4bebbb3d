import logging
from typing import Dict, Iterator, List, Optional, Tuple

from studentcms.elements.record import RecordPatch, StudentRecord
from studentcms.utils.utils import DuplicateIdError, RecordNotFoundError

logger = logging.getLogger(__name__)


class StudentTable:
    """Insertion-ordered rows with an id index.

    ``rows`` keeps the order records were appended in, ``index`` maps each id to
    the record object stored in ``rows``. Every method leaves the two in step.
    """

    def __init__(self):
        self.rows: List[StudentRecord] = []
        self.index: Dict[int, StudentRecord] = {}

    def insert_row(self, record: StudentRecord, position: Optional[int] = None) -> int:
        if record.id in self.index:
            raise DuplicateIdError(record.id)
        row = record.copy()
        if position is None or position >= len(self.rows):
            self.rows.append(row)
            position = len(self.rows) - 1
        else:
            self.rows.insert(max(position, 0), row)
        self.index[row.id] = row
        return position

    def update_row(self, record_id: int, patch: RecordPatch) -> Tuple[StudentRecord, StudentRecord]:
        current = self.index.get(record_id)
        if current is None:
            raise RecordNotFoundError(record_id)
        old = current.copy()
        new = patch.apply(current)
        # mutate in place so the row keeps its position
        current.name = new.name
        current.programme = new.programme
        current.mark = new.mark
        return old, current.copy()

    def delete_row(self, record_id: int) -> Tuple[int, StudentRecord]:
        """Remove the row and return it with the position it held."""
        row = self.index.pop(record_id, None)
        if row is None:
            raise RecordNotFoundError(record_id)
        pos = next(i for i, r in enumerate(self.rows) if r is row)
        del self.rows[pos]
        return pos, row

    def get(self, record_id: int) -> Optional[StudentRecord]:
        row = self.index.get(record_id)
        return row.copy() if row is not None else None

    def clear(self):
        self.rows = []
        self.index = {}

    def load_rows(self, records: List[StudentRecord]) -> int:
        """Replace the table contents with ``records`` in file order.

        Rows whose id repeats an earlier row are skipped so ids stay unique.
        Returns the number of rows skipped.
        """
        self.clear()
        skipped = 0
        for record in records:
            if record.id in self.index:
                logger.warning("Skipping duplicate ID %d while loading", record.id)
                skipped += 1
                continue
            self.rows.append(record.copy())
            self.index[record.id] = self.rows[-1]
        return skipped

    def __iter__(self) -> Iterator[StudentRecord]:
        return (r.copy() for r in self.rows)

    def __len__(self) -> int:
        return len(self.rows)
