"""
Bind value extraction.

The generator never produces placeholders; the literals already substituted
into the WHERE clause stand in for the statement's bind variables.
"""

import re

from sqllog_synth.core.fingerprint import LITERAL_PATTERN

WHERE_PATTERN = re.compile(r"WHERE", re.IGNORECASE)


def extract_bind_values(sql: str) -> str:
    """
    Return the literal values that follow the first WHERE keyword.

    The keyword is matched case-insensitively. Matches are returned in source
    order, joined with ``", "`` and not deduplicated. String literals keep
    their quotes. Escaped quotes inside strings are not supported.

    Args:
        sql: Full statement text.

    Returns:
        Comma-joined literals, or an empty string when there is no WHERE.
    """
    where = WHERE_PATTERN.search(sql)
    if where is None:
        return ""

    return ", ".join(
        match.group(0) for match in LITERAL_PATTERN.finditer(sql, where.end())
    )
