from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


SEPARATOR_CELL_RE = re.compile(r"^\s*:?-+:?\s*$")
CELL_LINE_BREAK = "<br>"
PAD_CELL = " "
PAD_SEPARATOR_CELL = "---"


@dataclass
class TableRegion:
    '''Line range [start, end] of consecutive pipe-framed lines'''

    start: int
    end: int
    max_columns: int
    has_separator: bool


@dataclass
class TableRow:
    cells: List[str]
    # Untouched source line, kept verbatim when the row needs no rewrite.
    source: Optional[str] = None

    @property
    def is_separator(self) -> bool:
        return is_separator_row(self.cells)


def is_table_line(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def _scan_cells(inner: str, track_code: bool, track_brackets: bool) -> Tuple[List[str], bool]:
    cells: List[str] = []
    current: List[str] = []
    in_code = False
    depth = 0
    previous = ""

    for char in inner:
        if track_code and char == "`":
            in_code = not in_code
        elif track_brackets and not in_code and char == "[":
            depth += 1
        elif track_brackets and not in_code and char == "]" and depth > 0:
            depth -= 1
        elif char == "|" and not in_code and depth == 0 and previous != "\\":
            cells.append("".join(current))
            current = []
            previous = char
            continue
        current.append(char)
        previous = char

    cells.append("".join(current))
    return cells, not (in_code or depth)


# Unclosed spans must not swallow the pipes after them, so a row whose code
# spans or brackets never close is re-split without tracking them.
SPLIT_MODES = ((True, True), (True, False), (False, True), (False, False))


def split_table_cells(line: str) -> List[str]:
    """Split a ``| a | b |`` line into raw cells.

    Pipes inside inline code spans, inside ``[...]`` link text or escaped
    with a backslash do not separate cells. Cell whitespace is kept.
    """

    inner = line.strip()[1:-1]
    for track_code, track_brackets in SPLIT_MODES:
        cells, closed = _scan_cells(inner, track_code, track_brackets)
        if closed:
            break
    return cells


def is_separator_row(cells: Sequence[str]) -> bool:
    return bool(cells) and all(SEPARATOR_CELL_RE.match(cell) for cell in cells)


def find_table_regions(lines: Sequence[str]) -> List[TableRegion]:
    regions: List[TableRegion] = []
    start: Optional[int] = None

    for idx in range(len(lines) + 1):
        if idx < len(lines) and is_table_line(lines[idx]):
            if start is None:
                start = idx
            continue
        if start is None:
            continue

        rows = [split_table_cells(line) for line in lines[start:idx]]
        data_rows = [cells for cells in rows if not is_separator_row(cells)]
        regions.append(
            TableRegion(
                start=start
                ,end=idx - 1
                ,max_columns=max((len(cells) for cells in data_rows), default=0)
                ,has_separator=len(data_rows) < len(rows)
            )
        )
        start = None
    return regions


def _join_cell(head: str, tail: str) -> str:
    addition = tail.strip()
    if not addition:
        return head
    if not head.strip():
        return f" {addition} "
    body = head.rstrip()
    return f"{body}\n{addition}{head[len(body):]}"


def _render_cells(cells: Sequence[str]) -> str:
    joined = "|".join(cell.replace("\n", CELL_LINE_BREAK) for cell in cells)
    return f"|{joined}|"


def _close_cell(cell: str) -> str:
    # A trailing backslash would escape the pipe written after the cell.
    return f"{cell} " if cell.endswith("\\") else cell


def _splits_back(cells: Sequence[str], width: int) -> bool:
    resplit = split_table_cells(_render_cells(cells))
    return len(resplit) == width and not is_separator_row(resplit)


def normalize_table_rows(lines: Sequence[str]) -> List[TableRow]:
    """Give every row of one table region the same number of cells.

    Short rows are padded with empty cells, except a short row that directly
    follows a full row: its cells continue the previous row's cells and are
    joined onto them with a newline. Separator rows are widened or trimmed.
    A rewrite that would not split back into the same cells is skipped, so
    the row stays as written.
    """

    rows = [split_table_cells(line) for line in lines]
    max_columns = max((len(cells) for cells in rows if not is_separator_row(cells)), default=0)

    normalized: List[TableRow] = []
    previous_full = False
    for line, cells in zip(lines, rows):
        if is_separator_row(cells):
            if len(cells) < max_columns:
                normalized.append(TableRow(cells + [PAD_SEPARATOR_CELL] * (max_columns - len(cells))))
            elif max_columns and len(cells) > max_columns:
                normalized.append(TableRow(cells[:max_columns]))
            else:
                normalized.append(TableRow(cells, source=line))
            previous_full = False
            continue

        if len(cells) >= max_columns:
            normalized.append(TableRow(cells, source=line))
            previous_full = True
            continue

        if previous_full:
            target = normalized[-1]
            merged = [
                _close_cell(_join_cell(cell, cells[idx])) if idx < len(cells) else cell
                for idx, cell in enumerate(target.cells)
            ]
            if _splits_back(merged, max_columns):
                target.cells = merged
                target.source = None
                continue

        padded = [_close_cell(cell) for cell in cells] + [PAD_CELL] * (max_columns - len(cells))
        if _splits_back(padded, max_columns):
            normalized.append(TableRow(padded))
        else:
            normalized.append(TableRow(cells, source=line))
        previous_full = False
    return normalized


def render_table_row(row: TableRow, indent: str = "") -> str:
    if row.source is not None:
        return row.source
    return f"{indent}{_render_cells(row.cells)}"


def normalize_table_columns(markdown: str) -> str:
    """Normalize every pipe table that has a separator row to a uniform column count.

    Pipe-framed blocks without a separator row are ordinary text and stay
    untouched. Running this on its own output changes nothing.
    """

    lines = markdown.split("\n")
    output: List[str] = []
    cursor = 0

    for region in find_table_regions(lines):
        output.extend(lines[cursor : region.start])
        region_lines = lines[region.start : region.end + 1]
        if region.has_separator:
            first = region_lines[0]
            indent = first[: len(first) - len(first.lstrip())]
            output.extend(render_table_row(row, indent) for row in normalize_table_rows(region_lines))
        else:
            output.extend(region_lines)
        cursor = region.end + 1

    output.extend(lines[cursor:])
    return "\n".join(output)
