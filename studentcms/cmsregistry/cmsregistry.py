from __future__ import annotations
import logging
import os
from typing import Any, Dict, List, Optional

from multipledispatch import dispatch

from studentcms.analytics.analytics import SortKey, SortOrder, Summary, sorted_records, summarise
from studentcms.elements.record import RecordPatch, StudentRecord
from studentcms.elements.studenttable import StudentTable
from studentcms.fileio.tablefile import TableFile
from studentcms.history.historylog import HistoryLog
from studentcms.utils.config import BACKUP_FILE, CMSConfig
from studentcms.utils.delta import Delta, DeleteDelta, InsertDelta, RestoreDelta, UpdateDelta
from studentcms.utils.utils import (DuplicateIdError, MissingBackupError, NotLoadedError, RecordNotFoundError,
                                    ValidationError)

logger = logging.getLogger(__name__)


class CMSRegistry:
    """In-memory student table plus its undo history and files.

    Public mutators (``insert``, ``update``, ``delete``, ``restore``) record a
    delta. The underscore versions change the table without recording and are
    what undo/redo replay through.
    """

    def __init__(self, config: Optional[CMSConfig] = None):
        self.config = config or CMSConfig()
        self.table = StudentTable()
        self.history = HistoryLog(limit=self.config.history_limit)
        self.file = TableFile()
        self.loaded = False
        self.modified = False

    def _require_loaded(self):
        if not self.loaded:
            raise NotLoadedError()

    # ---- loading ----
    def open(self) -> bool:
        """Load the primary file once. Returns False if it was already loaded."""
        if self.loaded:
            return False
        self._load(self.config.primary_path)
        return True

    def _load(self, path: str):
        # load_rows replaces the table only after a successful read.
        records = self.file.read_records(path)
        skipped = self.table.load_rows(records)
        self.loaded = True
        logger.info("Loaded %d records from %s (%d duplicate ids skipped)", len(self.table), path, skipped)

    # ---- read side ----
    def records(self) -> List[StudentRecord]:
        self._require_loaded()
        return list(self.table)

    def query(self, record_id: int) -> StudentRecord:
        self._require_loaded()
        record = self.table.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def sorted_records(self, key: SortKey, order: SortOrder = SortOrder.ASC) -> List[StudentRecord]:
        self._require_loaded()
        return sorted_records(self.table, key, order)

    def summary(self, programme: Optional[str] = None) -> Optional[Summary]:
        self._require_loaded()
        return summarise(self.table, programme)

    def list_history(self) -> List[Dict[str, Any]]:
        return self.history.list_history()

    # ---- private mutators (never record) ----
    def _insert(self, record: StudentRecord, position: Optional[int] = None) -> bool:
        try:
            self.table.insert_row(record, position)
        except DuplicateIdError:
            logger.debug("Replay insert of existing ID %d ignored", record.id)
            return False
        self.modified = True
        return True

    def _update(self, record_id: int, patch: RecordPatch) -> bool:
        try:
            self.table.update_row(record_id, patch)
        except RecordNotFoundError:
            logger.debug("Replay update of missing ID %d ignored", record_id)
            return False
        self.modified = True
        return True

    def _delete(self, record_id: int) -> bool:
        try:
            self.table.delete_row(record_id)
        except RecordNotFoundError:
            logger.debug("Replay delete of missing ID %d ignored", record_id)
            return False
        self.modified = True
        return True

    def _restore(self):
        self._load(self.config.backup_path)
        self.modified = True

    # ---- public mutators (record a delta) ----
    def insert(self, record: StudentRecord) -> StudentRecord:
        self._require_loaded()
        self.table.insert_row(record)
        self.modified = True
        stored = self.table.get(record.id)
        self.history.record(InsertDelta(new=stored))
        logger.info("Inserted ID %d", record.id)
        return stored

    def update(self, record_id: int, patch: RecordPatch) -> StudentRecord:
        self._require_loaded()
        if patch.is_empty():
            raise ValidationError("At least one of NAME, PROGRAMME, or MARK must be provided for UPDATE.")
        old, new = self.table.update_row(record_id, patch)
        self.modified = True
        self.history.record(UpdateDelta(old=old, new=new))
        logger.info("Updated ID %d", record_id)
        return new

    def delete_preview(self, record_id: int) -> StudentRecord:
        """Presence check before a confirmed delete. Changes nothing."""
        return self.query(record_id)

    def delete(self, record_id: int) -> StudentRecord:
        self._require_loaded()
        position, removed = self.table.delete_row(record_id)
        self.modified = True
        self.history.record(DeleteDelta(old=removed.copy(), position=position))
        logger.info("Deleted ID %d", record_id)
        return removed

    def backup_exists(self) -> bool:
        path = self.config.backup_path
        return os.path.isfile(path) and os.access(path, os.R_OK)

    def restore(self):
        self._require_loaded()
        if not self.backup_exists():
            raise MissingBackupError(f"Backup file \"{BACKUP_FILE}\" does not exist. Cannot restore.")
        self._restore()
        self.history.record(RestoreDelta())
        logger.info("Restored from %s", self.config.backup_path)

    # ---- undo / redo ----
    @dispatch(InsertDelta)
    def _revert(self, delta):
        self._delete(delta.new.id)

    @dispatch(UpdateDelta)
    def _revert(self, delta):
        self._update(delta.new.id, RecordPatch.from_record(delta.old))

    @dispatch(DeleteDelta)
    def _revert(self, delta):
        self._insert(delta.old, delta.position)

    @dispatch(RestoreDelta)
    def _revert(self, delta):
        # Reloads whatever the primary holds now; a save after the restore
        # means this is a reload, not the exact pre-restore state.
        self._load(self.config.primary_path)
        self.modified = True

    @dispatch(InsertDelta)
    def _reapply(self, delta):
        self._insert(delta.new)

    @dispatch(UpdateDelta)
    def _reapply(self, delta):
        self._update(delta.new.id, RecordPatch.from_record(delta.new))

    @dispatch(DeleteDelta)
    def _reapply(self, delta):
        self._delete(delta.old.id)

    @dispatch(RestoreDelta)
    def _reapply(self, delta):
        self._restore()

    def undo(self) -> Optional[Delta]:
        self._require_loaded()
        return self.history.undo(self._revert)

    def redo(self) -> Optional[Delta]:
        self._require_loaded()
        return self.history.redo(self._reapply)

    # ---- saving ----
    def save(self) -> bool:
        """Write the table back. Returns False when the file already matches."""
        if not self.loaded:
            raise NotLoadedError("No database loaded. Nothing to save.")
        primary = self.config.primary_path
        on_disk = self.file.read_bytes(primary)
        in_memory = self.file.serialise(self.table).encode("utf-8")
        if on_disk == in_memory:
            logger.info("Save skipped, %s unchanged", primary)
            return False
        self.file.write_backup(self.config.backup_path, on_disk)
        self.file.write_primary(primary, in_memory)
        self.modified = False
        logger.info("Saved %d records to %s", len(self.table), primary)
        return True
