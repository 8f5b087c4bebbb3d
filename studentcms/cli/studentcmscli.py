from __future__ import annotations
import argparse
import logging
import sys
from typing import Callable, List, Optional

from studentcms.analytics.analytics import SortKey
from studentcms.cli.commandparser import FieldMode, parse_confirmation, parse_fields, parse_show, split_command
from studentcms.cli.tableformat import format_records, format_summary, sort_header
from studentcms.cmsregistry.cmsregistry import CMSRegistry
from studentcms.utils.config import DEFAULT_DATA_DIR, PRIMARY_FILE, PROMPT, TABLE_NAME, CMSConfig
from studentcms.utils.utils import CMSError, NotLoadedError, ValidationError

logger = logging.getLogger(__name__)

BANNER = "Student Course Management System (P4_1-CMS). Type HELP for commands."

HELP = """\nCommands (keywords are case-insensitive):
  OPEN                                          Load the database file
  SHOW ALL                                      List all records
  SHOW ALL SORT BY (ID|MARK) [ASC|DESC]         List records sorted
  SHOW SUMMARY [PROGRAMME=<value>]              Count, average, highest and lowest marks
  INSERT ID=<id> [NAME=..] [PROGRAMME=..] [MARK=..]
  UPDATE ID=<id> [NAME=..] [PROGRAMME=..] [MARK=..]
  DELETE ID=<id>                                Asks for confirmation
  QUERY ID=<id>
  UNDO / REDO / HISTORY
  SAVE                                          Back up the file, then write changes
  RESTORE                                       Reload from the backup file
  QUIT
"""

NEEDS_DATABASE = {"SHOW", "INSERT", "UPDATE", "DELETE", "QUERY", "UNDO", "REDO", "SAVE", "RESTORE", "HISTORY"}
NO_ARGUMENTS = {"OPEN", "UNDO", "REDO", "SAVE", "RESTORE", "QUIT", "HELP", "HISTORY"}


class CLI:
    def __init__(self, registry: Optional[CMSRegistry] = None, reader: Optional[Callable[[str], str]] = None):
        self.reg = registry if registry is not None else CMSRegistry()
        self.reader = reader if reader is not None else input
        self.running = True

    def run(self) -> int:
        print(BANNER)
        while self.running:
            try:
                line = self.reader("\n" + PROMPT)
            except (EOFError, OSError) as e:
                logger.warning("Input stream closed: %r", e)
                print("CMS: Fatal error reading input.")
                break
            except KeyboardInterrupt:
                print("\nCMS: Interrupted. Type QUIT to exit.")
                continue
            try:
                if not line.strip():
                    continue
                self.handle(line)
            except CMSError as e:
                logger.info("%s: %s", type(e).__name__, e)
                print(f"CMS: {e}")
            except KeyboardInterrupt:
                print("\nCMS: Interrupted. Type QUIT to exit.")
            except Exception as e:
                logger.exception("Unexpected error handling %r", line)
                print("CMS: Unexpected error:", e)
        print("CMS: Exiting program.")
        return 0

    def _confirm(self, question: str) -> Optional[str]:
        """Ask a Y/N question. Returns "Y", "N", "" for anything else, None if input failed."""
        print(question)
        try:
            answer = self.reader("\n" + PROMPT)
        except (EOFError, OSError):
            return None
        decision = parse_confirmation(answer)
        if decision is None:
            return ""
        return "Y" if decision else "N"

    def _print_lines(self, lines: List[str]):
        for line in lines:
            print(line)

    def handle(self, line: str):
        cmd, rest = split_command(line)
        if not cmd:
            return
        if cmd in NO_ARGUMENTS and rest:
            if cmd == "QUIT":
                raise ValidationError("Enter a valid command (QUIT takes no arguments).")
            raise ValidationError("Enter a valid command.")
        if cmd in NEEDS_DATABASE and not self.reg.loaded:
            raise NotLoadedError()

        if cmd == "HELP":
            print(HELP)
            return
        if cmd == "OPEN":
            if self.reg.open():
                print(f"CMS: The database file \"{PRIMARY_FILE}\" is successfully opened.")
            else:
                print(f"CMS: The database file \"{PRIMARY_FILE}\" has already been opened.")
            return
        if cmd == "SHOW":
            self._show(rest)
            return

        if cmd == "INSERT":
            fields = parse_fields(rest, FieldMode.INSERT)
            self.reg.insert(fields.to_record())
            print(f"CMS: Record with ID={fields.id} inserted.")
            return
        if cmd == "UPDATE":
            fields = parse_fields(rest, FieldMode.UPDATE)
            self.reg.update(fields.id, fields.to_patch())
            print(f"CMS: The record with ID={fields.id} is successfully updated.")
            return
        if cmd == "DELETE":
            self._delete(rest)
            return
        if cmd == "QUERY":
            fields = parse_fields(rest, FieldMode.ID_ONLY)
            record = self.reg.query(fields.id)
            print(f"CMS: The record with ID={fields.id} is found in the data table.")
            self._print_lines(format_records([record]))
            return

        if cmd == "UNDO":
            delta = self.reg.undo()
            if delta is None:
                print("CMS: Nothing to undo.")
            else:
                print(f"CMS: UNDO -> Undid {delta.describe()}.")
            return
        if cmd == "REDO":
            delta = self.reg.redo()
            if delta is None:
                print("CMS: Nothing to redo.")
            else:
                print(f"CMS: REDO -> Redid {delta.describe()}.")
            return
        if cmd == "HISTORY":
            entries = self.reg.list_history()
            if not entries:
                print("CMS: History is empty.")
            for h in entries:
                target = f" ID={h['record_id']}" if h["record_id"] is not None else ""
                print(f"  {h['idx']}: {h['action']}{target} ({h['stack']})")
            return

        if cmd == "SAVE":
            if self.reg.save():
                print(f"CMS: The database file \"{PRIMARY_FILE}\" has been successfully saved.")
            else:
                print("CMS: No changes detected. Nothing to save.")
            return
        if cmd == "RESTORE":
            answer = self._confirm("CMS: WARNING: This will overwrite the current in-memory state with the backup "
                                   "file. Are you sure? Type \"Y\" to confirm or \"N\" to cancel.")
            if answer is None:
                print("CMS: Fatal error reading confirmation input. Restore cancelled.")
            elif answer == "Y":
                self.reg.restore()
                print("CMS: Database successfully restored from backup. Changes are not saved yet.")
            elif answer == "N":
                print("CMS: Restore operation cancelled.")
            else:
                print("CMS: Invalid input. Restore operation cancelled.")
            return
        if cmd == "QUIT":
            self._quit()
            return

        raise ValidationError("Enter a valid command.")

    def _show(self, rest: str):
        request = parse_show(rest)
        if request.kind == "summary":
            summary = self.reg.summary(request.programme)
            if summary is None:
                if request.programme is not None:
                    print(f"CMS: No matching records found for programme '{request.programme}'.")
                else:
                    print("CMS: No records found.")
                return
            self._print_lines(format_summary(summary))
            return
        if request.kind == "sorted":
            records = self.reg.sorted_records(request.sort_key, request.order)
            key_name = "ID" if request.sort_key is SortKey.ID else "mark"
            header = sort_header(key_name, request.order.value)
        else:
            records = self.reg.records()
            header = f"CMS: Here are all the records found in the table \"{TABLE_NAME}\"."
        if not records:
            print("CMS: No records to display.")
            return
        self._print_lines(format_records(records, header))

    def _delete(self, rest: str):
        fields = parse_fields(rest, FieldMode.ID_ONLY)
        self.reg.delete_preview(fields.id)
        answer = self._confirm(f"CMS: Are you sure you want to delete record with ID={fields.id}? "
                               "Type \"Y\" to confirm or \"N\" to cancel.")
        if answer is None:
            print("CMS: Fatal error reading confirmation input. The deletion is cancelled.")
        elif answer == "Y":
            self.reg.delete(fields.id)
            print(f"CMS: The record with ID={fields.id} is successfully deleted.")
        elif answer == "N":
            print("CMS: The deletion is cancelled.")
        else:
            print("CMS: Invalid input. The deletion is cancelled.")

    def _quit(self):
        if self.reg.loaded and self.reg.modified:
            question = ("CMS: WARNING: You have unsaved changes. Are you sure you want to quit? "
                        "Type \"Y\" to confirm or \"N\" to cancel.")
        else:
            question = ("CMS: Are you sure you want to quit? There are no unsaved changes. "
                        "Type \"Y\" to confirm or \"N\" to cancel.")
        answer = self._confirm(question)
        if answer is None:
            print("CMS: Fatal error reading confirmation input. Quit cancelled.")
        elif answer == "Y":
            self.running = False
        elif answer == "N":
            print("CMS: Quit operation cancelled.")
        else:
            print("CMS: Invalid input. Quit operation cancelled.")


def setup_logging(log_path: str, level: int = logging.INFO):
    """Send log records to ``log_path`` so they never mix with REPL output."""
    try:
        logging.basicConfig(
            filename=log_path,
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    except OSError as e:
        logging.getLogger().addHandler(logging.NullHandler())
        print(f"CMS: Logging disabled, cannot open {log_path}: {e}", file=sys.stderr)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studentcms", description="Student record database shell.")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR,
                        help="directory holding P4_1-CMS.txt and its backup (default: %(default)s)")
    parser.add_argument("--log-file", default=None,
                        help="log file path (default: <data-dir>/P4_1-CMS.log)")
    parser.add_argument("--verbose", action="store_true", help="log at DEBUG level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    config = CMSConfig(data_dir=args.data_dir, log_file=args.log_file)
    setup_logging(config.log_path, logging.DEBUG if args.verbose else logging.INFO)
    logger.info("Starting with data directory %s", config.data_dir)
    return CLI(CMSRegistry(config)).run()
