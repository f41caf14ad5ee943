import math
from pathlib import Path
from typing import Dict, Iterator, List, Any, Optional, Tuple, Union

Number = Union[int, float]


def coerce_number(value: Any, integer: bool = False) -> Tuple[Optional[Number], bool]:
    """
    Convert a raw cell to a number.

    Returns ``(number, flagged)``. Empty cells become ``(None, False)``.
    Text that is not numeric, NaN and infinity become ``(0, True)`` so the caller decides
    whether that is a fatal format problem or a value to count and report.
    """
    if value is None:
        return None, False
    if isinstance(value, bool):
        return 0, True
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0, True
        return (int(value) if integer else value), False

    text = str(value).strip()
    if text == '':
        return None, False
    try:
        return int(text), False
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0, True
    if not math.isfinite(number):
        return 0, True
    if integer:
        return int(number), False
    return number, False


def _split_csv_line(line: str, sep: str = ',') -> List[str]:
    # Split CSV line handling quotes and escaped quotes
    out = []
    cur = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                cur.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue
        if ch == sep and not in_quotes:
            out.append(''.join(cur))
            cur = []
            i += 1
            continue
        cur.append(ch)
        i += 1

    out.append(''.join(cur))
    return out


def read_csv_rows(file_path: Union[str, Path], separator: str = ',') -> Iterator[Dict[str, str]]:
    """Yield one ``{header: raw text}`` dict per non-empty line of a CSV file."""
    path = Path(file_path) if not isinstance(file_path, Path) else file_path

    if not path.exists():
        raise FileNotFoundError(f"File {path} not found")

    if path.stat().st_size == 0:
        return

    with open(path, 'r', newline='', encoding='utf-8-sig') as f:
        header_line = f.readline().rstrip('\r\n')
        headers = [h.strip() for h in _split_csv_line(header_line, separator)]

        for raw in f:
            line = raw.rstrip('\r\n')
            if not line:
                continue
            values = _split_csv_line(line, separator)

            if len(values) < len(headers):
                values += [''] * (len(headers) - len(values))

            if len(values) > len(headers):
                values = values[:len(headers)]

            yield dict(zip(headers, values))


def read_csv_header(file_path: Union[str, Path], separator: str = ',') -> List[str]:
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File {path} not found")
    with open(path, 'r', newline='', encoding='utf-8-sig') as f:
        header_line = f.readline().rstrip('\r\n')
    if not header_line:
        return []
    return [h.strip() for h in _split_csv_line(header_line, separator)]
