"""Price text parsing for scraped values.

Scraped prices come with grouping separators, currency symbols and
whitespace ("$ 1,234.56", "0.00012 BTC"). Only digits, '.', '-', and
exponent markers are kept before conversion.
"""

import math
import re

_SEPARATORS = re.compile(r"[,\s]")
_NON_NUMERIC = re.compile(r"[^0-9.\-eE]")


def parse_price_text(text: str | None) -> float | None:
    """Extract a finite float from scraped text.

    Returns:
        The parsed value, or None if nothing numeric could be read
    """
    if not text:
        return None

    cleaned = _NON_NUMERIC.sub("", _SEPARATORS.sub("", text))
    if not cleaned:
        return None

    try:
        value = float(cleaned)
    except ValueError:
        # Leading numeric prefix, e.g. "12.5e" or "3-4"
        match = re.match(r"-?\d*\.?\d+(?:[eE]-?\d+)?", cleaned)
        if match is None:
            return None
        value = float(match.group(0))

    return value if math.isfinite(value) else None
