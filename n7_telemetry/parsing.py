"""
Shared normalization helpers for probe output.

Sizes always come out in GB and percentages always land in [0, 100].
"""
import math
import re
from typing import Optional

# Multiplicative factors to GB for df-style unit suffixes
_SIZE_FACTORS = {
    "P": 1024.0 * 1024.0,
    "T": 1024.0,
    "G": 1.0,
    "M": 1.0 / 1024.0,
    "K": 1.0 / (1024.0 * 1024.0),
}

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")


def parse_size_gb(token: str) -> float:
    """
    Convert a df-style size token ("2T", "500G", "512M", "1024K", "3.5") to GB.
    An unsuffixed value is taken as GB already.
    Raises ValueError when the token is not a size.
    """
    token = token.strip().replace(",", ".")
    if not token:
        raise ValueError("empty size token")

    factor = 1.0
    suffix = token[-1].upper()
    if suffix in _SIZE_FACTORS:
        factor = _SIZE_FACTORS[suffix]
        token = token[:-1]

    value = float(token)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"not a size: {token}")
    return value * factor


def parse_percent(token: str) -> float:
    """
    Parse a "NN%" token. Raises ValueError when the token is not a number.
    """
    value = float(token.strip().rstrip("%").strip())
    if not math.isfinite(value):
        raise ValueError(f"not a percentage: {token}")
    return clamp_percent(value)


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def safe_int(text: Optional[str], default: int = 0) -> int:
    """
    Lenient integer parse: leading number of the text, truncated.
    "8192 MiB" → 8192, "12345.67" → 12345, "[N/A]" → default.
    Negative values fall back to the default.
    """
    value = safe_float(text, float(default))
    return int(value)


def safe_float(text: Optional[str], default: float = 0.0) -> float:
    if text is None:
        return default
    match = _LEADING_NUMBER.match(text)
    if not match:
        return default
    value = float(match.group(1))
    return value if value >= 0 else default


def first_value(text: str, key: str, sep: str = ":") -> Optional[str]:
    """
    Value of the first line starting with `key`, split on the first `sep`.
    Returns None when no such line exists.
    """
    for line in text.splitlines():
        if line.startswith(key) and sep in line:
            return line.split(sep, 1)[1].strip()
    return None
