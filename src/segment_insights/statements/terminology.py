"""Classic/modern segment terminology rewrite."""

import re

# classic -> modern, singular and plural, with both compound spellings
_PAIRS: list[tuple[str, str]] = [
    ("Near-Apostles", "Near-Advocates"),
    ("Near Apostles", "Near Advocates"),
    ("Near-Apostle", "Near-Advocate"),
    ("Near Apostle", "Near Advocate"),
    ("Apostles", "Advocates"),
    ("Apostle", "Advocate"),
    ("Near-Terrorists", "Near-Trolls"),
    ("Near Terrorists", "Near Trolls"),
    ("Near-Terrorist", "Near-Troll"),
    ("Near Terrorist", "Near Troll"),
    ("Terrorists", "Trolls"),
    ("Terrorist", "Troll"),
]


def _table(direction: str) -> dict[str, str]:
    table: dict[str, str] = {}
    for classic, modern in _PAIRS:
        source, target = (classic, modern) if direction == "modern" else (modern, classic)
        table[source] = target
    return table


def _pattern(table: dict[str, str]) -> re.Pattern:
    # Longest alternatives first so "Near-Apostles" wins over "Apostles"
    alternatives = sorted(table, key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(re.escape(a) for a in alternatives) + r")\b")


_TABLES = {scheme: _table(scheme) for scheme in ("modern", "classic")}
_PATTERNS = {scheme: _pattern(table) for scheme, table in _TABLES.items()}


def apply_terminology(text: str, scheme: str) -> str:
    """
    Rewrite segment names to the requested naming scheme in a single pass.

    Matches capitalised whole words only, so "advocacy", "Apostleship" and
    the ordinary word "advocates" are untouched.

    Args:
        text: Statement text
        scheme: "modern" (Advocates/Trolls) or "classic" (Apostles/Terrorists)

    Returns:
        Rewritten text
    """
    if scheme not in _PATTERNS:
        raise ValueError(f"Unknown naming scheme '{scheme}'")
    table = _TABLES[scheme]
    return _PATTERNS[scheme].sub(lambda match: table[match.group(0)], text)
