from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from studentcms.elements.record import StudentRecord


class SortKey(Enum):
    ID = "ID"
    MARK = "MARK"


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


def sorted_records(records: Iterable[StudentRecord], key: SortKey,
                   order: SortOrder = SortOrder.ASC) -> List[StudentRecord]:
    """Return a new list sorted by ``key``.

    The sort is stable in both directions: records with equal keys keep
    the order they were inserted in, also for DESC.
    """
    if key is SortKey.ID:
        keyfunc = lambda r: r.id
    else:
        keyfunc = lambda r: r.mark
    return sorted((r.copy() for r in records), key=keyfunc, reverse=order is SortOrder.DESC)


@dataclass
class Summary:
    programme: Optional[str]
    total: int
    average: float
    highest: float
    lowest: float
    top: List[StudentRecord] = field(default_factory=list)
    bottom: List[StudentRecord] = field(default_factory=list)


def matches_programme(record: StudentRecord, programme: Optional[str]) -> bool:
    return programme is None or record.programme.lower() == programme.lower()


def summarise(records: Iterable[StudentRecord], programme: Optional[str] = None) -> Optional[Summary]:
    population = [r for r in records if matches_programme(r, programme)]
    if not population:
        return None
    marks = [r.mark for r in population]
    highest = max(marks)
    lowest = min(marks)
    return Summary(
        programme=programme,
        total=len(population),
        average=sum(marks) / len(population),
        highest=highest,
        lowest=lowest,
        top=[r for r in population if r.mark == highest],
        bottom=[r for r in population if r.mark == lowest],
    )
