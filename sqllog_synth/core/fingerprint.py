"""
SQL Fingerprinting and Connection Identity Utilities.

Provides content-derived identifiers for the generated log:
- connection hashes derived from the connection endpoint
- statement hashes derived from the statement shape (literals removed)
"""

import hashlib
import re

# Numeric and single-quoted string literals. Compiled once and shared
# read-only by every worker thread.
LITERAL_PATTERN = re.compile(r"[-+]?\d+(\.\d+)?|'[^']*'")

CONNECTION_HASH_PREFIX = "conn_"
SQL_HASH_PREFIX = "sql_"
CONNECTION_HASH_LENGTH = 32
SQL_HASH_LENGTH = 16


def normalize_sql(sql: str) -> str:
    """
    Strip literal values from a statement so it can be fingerprinted by shape.

    Numbers (optionally signed, optionally decimal) and single-quoted strings
    are removed outright. Quotes are never escaped: a ``'`` always closes the
    string it opened.

    Args:
        sql: Statement text.

    Returns:
        Statement text with every literal removed.
    """
    return LITERAL_PATTERN.sub("", sql)


def sql_hash(sql: str) -> str:
    """
    Compute the statement hash for a SQL statement.

    Statements that differ only in literal values hash identically.

    Args:
        sql: Statement text.

    Returns:
        ``sql_`` followed by the first 16 hex digits of the SHA-256 digest.
    """
    digest = hashlib.sha256(normalize_sql(sql).encode("utf-8")).hexdigest()
    return f"{SQL_HASH_PREFIX}{digest[:SQL_HASH_LENGTH]}"


def connection_hash(db_ip: str, client_ip: str, app_name: str) -> str:
    """
    Compute the connection identity for an endpoint triple.

    This is a pure function of its inputs, so two connections opened from the
    same (db_ip, client_ip, app_name) share an identity.

    Returns:
        ``conn_`` followed by the first 32 hex digits of the SHA-256 digest.
    """
    hasher = hashlib.sha256()
    hasher.update(db_ip.encode("utf-8"))
    hasher.update(client_ip.encode("utf-8"))
    hasher.update(app_name.encode("utf-8"))
    return f"{CONNECTION_HASH_PREFIX}{hasher.hexdigest()[:CONNECTION_HASH_LENGTH]}"
