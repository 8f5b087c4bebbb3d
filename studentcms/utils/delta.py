from dataclasses import dataclass
from typing import Optional, Union

from studentcms.elements.record import StudentRecord


@dataclass
class InsertDelta:
    new: StudentRecord
    LABEL = "INSERT"

    @property
    def record_id(self) -> int:
        return self.new.id

    def describe(self) -> str:
        return f"{self.LABEL} (ID {self.new.id})"


@dataclass
class UpdateDelta:
    old: StudentRecord
    new: StudentRecord
    LABEL = "UPDATE"

    @property
    def record_id(self) -> int:
        return self.new.id

    def describe(self) -> str:
        return f"{self.LABEL} on (ID {self.new.id})"


@dataclass
class DeleteDelta:
    old: StudentRecord
    position: Optional[int] = None
    LABEL = "DELETE"

    @property
    def record_id(self) -> int:
        return self.old.id

    def describe(self) -> str:
        return f"{self.LABEL} (ID {self.old.id})"


@dataclass
class RestoreDelta:
    """Reverting reloads the primary file; no payload is kept."""
    LABEL = "RESTORE"

    @property
    def record_id(self) -> None:
        return None

    def describe(self) -> str:
        return f"{self.LABEL} operation"


Delta = Union[InsertDelta, UpdateDelta, DeleteDelta, RestoreDelta]
