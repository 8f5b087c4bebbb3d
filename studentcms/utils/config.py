import os
from dataclasses import dataclass
from typing import Optional

# ---- Constants ----
DATABASE_NAME = "P4_1-CMS"
AUTHORS = "P4-1"
TABLE_NAME = "StudentRecords"
COLUMNS = ("ID", "Name", "Programme", "Mark")

PRIMARY_FILE = DATABASE_NAME + ".txt"
BACKUP_FILE = DATABASE_NAME + ".bak"
LOG_FILE = DATABASE_NAME + ".log"
DEFAULT_DATA_DIR = os.path.join(".", "data")

MAX_NAME = 99
MAX_PROGRAMME = 99
MIN_MARK = 0.0
MAX_MARK = 100.0

# Display
NAME_WIDTH = 35
PROG_WIDTH = 35
MIN_NAME_COL = 6
MIN_PROG_COL = 11

PROMPT = "P4_1: "


@dataclass
class CMSConfig:
    data_dir: str = DEFAULT_DATA_DIR
    log_file: Optional[str] = None
    history_limit: Optional[int] = None  # None = unbounded

    @property
    def primary_path(self) -> str:
        return os.path.join(self.data_dir, PRIMARY_FILE)

    @property
    def backup_path(self) -> str:
        return os.path.join(self.data_dir, BACKUP_FILE)

    @property
    def log_path(self) -> str:
        return self.log_file if self.log_file else os.path.join(self.data_dir, LOG_FILE)
