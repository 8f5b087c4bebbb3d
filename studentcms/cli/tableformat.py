from typing import Iterable, List

from studentcms.analytics.analytics import Summary
from studentcms.elements.record import StudentRecord
from studentcms.utils.config import MIN_NAME_COL, MIN_PROG_COL, NAME_WIDTH, PROG_WIDTH, TABLE_NAME


def column_widths(records: List[StudentRecord]):
    longest_name = max([len("Name")] + [len(r.name) for r in records])
    longest_prog = max([len("Programme")] + [len(r.programme) for r in records])
    name_w = max(min(longest_name + 2, NAME_WIDTH + 2), MIN_NAME_COL)
    prog_w = max(min(longest_prog + 2, PROG_WIDTH + 2), MIN_PROG_COL)
    return name_w, prog_w


def _chunks(text: str, width: int) -> List[str]:
    return [text[i:i + width] for i in range(0, len(text), width)] or [""]


def format_records(records: Iterable[StudentRecord], header: str = "") -> List[str]:
    """Lay records out as ID / Name / Programme / Mark columns.

    Names and programmes longer than the display width wrap onto extra
    lines; ID and mark are only printed on the first line of a record.
    """
    records = list(records)
    name_w, prog_w = column_widths(records)
    lines: List[str] = [header]
    lines.append(f"{'ID':<8} {'Name':<{name_w}} {'Programme':<{prog_w}} {'Mark':<5}")
    for r in records:
        names = _chunks(r.name, NAME_WIDTH)
        progs = _chunks(r.programme, PROG_WIDTH)
        for i in range(max(len(names), len(progs))):
            id_col = str(r.id) if i == 0 else ""
            name = names[i] if i < len(names) else ""
            prog = progs[i] if i < len(progs) else ""
            line = f"{id_col:<8} {name:<{name_w}} {prog:<{prog_w}} "
            if i == 0:
                line += f"{r.mark:.1f}"
            lines.append(line)
    return lines


def _holders(records: List[StudentRecord]) -> List[str]:
    return [f"{n}. {r.name} (ID: {r.id})" for n, r in enumerate(records, start=1)]


def format_summary(summary: Summary) -> List[str]:
    title = f"CMS: Here are summary statistics from the table \"{TABLE_NAME}\""
    if summary.programme is not None:
        title += f" (Programme: {summary.programme})"
    lines = [
        title + ".",
        f"Total students: {summary.total}",
        f"Average mark: {summary.average:.2f}",
        "",
        f"Highest mark: {summary.highest:.1f}",
    ]
    lines += _holders(summary.top)
    lines += ["", f"Lowest mark: {summary.lowest:.1f}"]
    lines += _holders(summary.bottom)
    return lines


def sort_header(key_name: str, order_name: str) -> str:
    return f"CMS: Here are all the records sorted by {key_name} {order_name} from the table \"{TABLE_NAME}\"."
