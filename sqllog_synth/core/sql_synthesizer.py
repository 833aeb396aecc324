"""
SQL Text Synthesizer for Audit Log Generation

This module produces plausible SQL statement text for the audit log:
- SELECT: column list + WHERE clause (dominant kind)
- INSERT: literal value tuple
- UPDATE: SET clause + WHERE clause
- DELETE: WHERE clause only
- ALTER: ADD COLUMN with a sampled name/type pair

Statements are text only; nothing here parses or executes SQL.
"""

import random
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

from sqllog_synth.models.sql_record import (
    EXEC_TIME_FORMAT,
    NOT_APPLICABLE,
    SqlStatement,
)


class SqlKind(str, Enum):
    """Statement kinds written to the sql_type column"""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALTER = "ALTER"


# Relative weights out of 100
KIND_WEIGHTS = {
    SqlKind.INSERT: 16,
    SqlKind.UPDATE: 10,
    SqlKind.DELETE: 5,
    SqlKind.ALTER: 3,
    SqlKind.SELECT: 66,
}

TABLE_NAMES = [
    "users",
    "orders",
    "products",
    "departments",
    "employees",
    "salaries",
    "projects",
    "tasks",
    "events",
    "logs",
]

SELECT_COLUMNS = [
    "id",
    "product_name",
    "age",
    "salary",
    "commission",
    "product",
    "price",
    "event_date",
    "department",
    "comm",
    "creation_date",
    "created_by",
    "updated_date",
    "updated_by",
]

PERSON_NAMES = ["John Doe", "Jane Smith", "Alice Johnson", "Bob Brown", "Charlie Davis"]
DEPARTMENTS = ["HR", "Engineering", "Sales"]
NAME_PREFIXES = ["A", "B", "C"]
ALTER_COLUMNS = ["attribute01", "attribute02", "attribute03"]
ALTER_TYPES = ["VARCHAR(255)", "INT", "DATE"]

MIN_WHERE_CONDITIONS = 4
MAX_WHERE_CONDITIONS = 8


def generate_where_clause(
    rng: random.Random, now: Optional[datetime] = None
) -> str:
    """
    Build a WHERE clause from freshly instantiated condition templates.

    Conditions are sampled with replacement, so one clause may repeat a
    condition.

    Args:
        rng: Random source owned by the caller.
        now: Reference time for the date-range condition.

    Returns:
        ``WHERE`` followed by 4-8 conditions joined with ``AND``.
    """
    now = now or datetime.now()
    range_start = now - timedelta(days=rng.randrange(0, 7))

    conditions = [
        f"age > {rng.randrange(20, 50)}",
        f"salary < {rng.randrange(3000, 10000)}",
        f"department = '{rng.choice(DEPARTMENTS)}'",
        f"commission = {rng.uniform(100.0, 1000.0):.2f}",
        f"name LIKE '{rng.choice(NAME_PREFIXES)}%'",
        f"last_update_by = '{rng.choice(PERSON_NAMES)}'",
        f"created_by = '{rng.choice(PERSON_NAMES)}'",
        f"event_date BETWEEN '{range_start.strftime(EXEC_TIME_FORMAT)}' "
        f"AND '{now.strftime(EXEC_TIME_FORMAT)}'",
    ]

    count = rng.randint(MIN_WHERE_CONDITIONS, MAX_WHERE_CONDITIONS)
    selected = rng.choices(conditions, k=count)
    return "WHERE " + " AND ".join(selected)


def generate_select_cols(rng: random.Random, sql_type: str) -> str:
    """Sample a non-empty column list for SELECT, or the N/A sentinel."""
    if sql_type != SqlKind.SELECT:
        return NOT_APPLICABLE
    count = rng.randrange(1, len(SELECT_COLUMNS))
    return ", ".join(rng.choices(SELECT_COLUMNS, k=count))


class SqlTextSynthesizer:
    """
    Generates SQL statements for one worker.

    The random source is passed in by the owning worker and never shared
    with another thread.
    """

    def __init__(
        self,
        rng: random.Random,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.random = rng
        self.clock = clock

    def choose_kind(self) -> SqlKind:
        """Sample a statement kind from the weighted distribution"""
        return self.random.choices(
            list(KIND_WEIGHTS), weights=list(KIND_WEIGHTS.values())
        )[0]

    def choose_table(self) -> str:
        return self.random.choice(TABLE_NAMES)

    def generate_statement(self, sql_type: Optional[SqlKind] = None) -> SqlStatement:
        """
        Generate one statement.

        Args:
            sql_type: Force a statement kind instead of sampling one.

        Returns:
            SqlStatement with kind, target table, column list and full text.
        """
        kind = SqlKind(sql_type) if sql_type is not None else self.choose_kind()
        table = self.choose_table()
        select_cols = generate_select_cols(self.random, kind)

        if kind == SqlKind.SELECT:
            text = self._generate_select(table, select_cols)
        elif kind == SqlKind.INSERT:
            text = self._generate_insert(table)
        elif kind == SqlKind.UPDATE:
            text = self._generate_update(table)
        elif kind == SqlKind.DELETE:
            text = self._generate_delete(table)
        else:
            text = self._generate_alter(table)

        return SqlStatement(
            sql_type=kind.value, table=table, select_cols=select_cols, text=text
        )

    def _where(self) -> str:
        return generate_where_clause(self.random, self.clock())

    def _generate_select(self, table: str, select_cols: str) -> str:
        return f"SELECT {select_cols} FROM {table} {self._where()}"

    def _generate_insert(self, table: str) -> str:
        values: List[str] = [
            str(self.random.randrange(1, 100)),
            f"'{self.random.choice(PERSON_NAMES)}'",
            str(self.random.randrange(20, 50)),
            str(self.random.randrange(3000, 10000)),
        ]
        return (
            f"INSERT INTO {table} (id, name, age, salary) "
            f"VALUES ({', '.join(values)})"
        )

    def _generate_update(self, table: str) -> str:
        set_clause = f"SET salary = {self.random.randrange(3000, 10000)}"
        return f"UPDATE {table} {set_clause} {self._where()}"

    def _generate_delete(self, table: str) -> str:
        return f"DELETE FROM {table} {self._where()}"

    def _generate_alter(self, table: str) -> str:
        """Generate an ADD COLUMN statement"""
        column = self.random.choice(ALTER_COLUMNS)
        column_type = self.random.choice(ALTER_TYPES)
        return f"ALTER TABLE {table} ADD COLUMN {column} {column_type}"
