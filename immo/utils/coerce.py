from typing import Optional

# signed 64-bit range of the integer columns
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


def to_int(v) -> Optional[int]:
    """Parse an integer-like value; anything unparseable or out of column range becomes ``None``."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        parsed = v
    else:
        text = str(v).strip()
        if not text or text.lower() == "null":
            return None
        try:
            parsed = int(text)
        except ValueError:
            return None
    if not INT_MIN <= parsed <= INT_MAX:
        return None
    return parsed


def to_str(v) -> Optional[str]:
    if v is None:
        return None
    text = str(v).strip()
    return text or None


def split_list(v, sep: str = "|") -> Optional[list]:
    """Split a delimited cell (as found in seed CSVs) into a list of strings."""
    if v is None:
        return None
    if isinstance(v, (list, tuple)):
        return [str(item) for item in v]
    if isinstance(v, float) and v != v:
        return None
    text = str(v).strip()
    if not text:
        return None
    return [part.strip() for part in text.split(sep) if part.strip()]
