from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class StudentRecord:
    id: int
    name: str = ""
    programme: str = ""
    mark: float = 0.0

    def copy(self) -> "StudentRecord":
        return replace(self)

    def to_line(self) -> str:
        return f"{self.id}\t{self.name}\t{self.programme}\t{self.mark:.1f}\n"

    def __repr__(self):
        return f"<StudentRecord {self.id} {self.name!r} {self.programme!r} {self.mark:.1f}>"


@dataclass(frozen=True)
class RecordPatch:
    """Partial update for a record. ``None`` means "leave the stored value alone"."""
    name: Optional[str] = None
    programme: Optional[str] = None
    mark: Optional[float] = None

    @classmethod
    def from_record(cls, record: StudentRecord) -> "RecordPatch":
        return cls(name=record.name, programme=record.programme, mark=record.mark)

    def is_empty(self) -> bool:
        return self.name is None and self.programme is None and self.mark is None

    def apply(self, record: StudentRecord) -> StudentRecord:
        return StudentRecord(
            id=record.id,
            name=record.name if self.name is None else self.name,
            programme=record.programme if self.programme is None else self.programme,
            mark=record.mark if self.mark is None else self.mark,
        )
