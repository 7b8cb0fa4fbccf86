import csv
import io
import sys

# Cells are bounded only by memory; the default limit is 128 KiB.
csv.field_size_limit(sys.maxsize)


def parse_csv(text: str) -> tuple[list[str], list[list[str]]]:
    """
    Parse CSV text into (headers, rows). The first record is the header row (cells trimmed);
    records whose cells are all blank are dropped. Quoted cells may contain commas, quotes
    (doubled) and newlines.
    """
    # newline="" lets the csv module see \r, \n and \r\n record endings untranslated.
    reader = csv.reader(io.StringIO(text or "", newline=""))
    records = list(reader)
    if not records:
        return [], []
    headers = [str(h).strip() for h in records[0]]
    rows = [row for row in records[1:] if any(str(cell).strip() for cell in row)]
    return headers, rows


def _render_row(cells: list[object]) -> str:
    out = io.StringIO(newline="")
    # A \r\n terminator makes the writer quote cells holding either character.
    csv.writer(out, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL).writerow(
        ["" if cell is None else str(cell) for cell in cells]
    )
    return out.getvalue()[:-2]


def serialize_csv(headers: list[str], rows: list[list[object]]) -> str:
    """Render a header row plus data rows joined by "\\n"; cells with quotes, commas or line breaks are quoted."""
    return "\n".join(_render_row(row) for row in [headers, *rows])
