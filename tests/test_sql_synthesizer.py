"""
Unit tests for SQL text synthesis.
"""

import random
import re
from collections import Counter
from datetime import datetime

import pytest

from sqllog_synth.core.sql_synthesizer import (
    SELECT_COLUMNS,
    TABLE_NAMES,
    SqlKind,
    SqlTextSynthesizer,
    generate_select_cols,
    generate_where_clause,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0)


def _synthesizer(seed: int = 42) -> SqlTextSynthesizer:
    return SqlTextSynthesizer(random.Random(seed), clock=lambda: FIXED_NOW)


def _condition_count(where_clause: str) -> int:
    # Each BETWEEN condition carries one extra " AND "
    return where_clause.count(" AND ") + 1 - where_clause.count("BETWEEN")


class TestWhereClause:
    """Tests for generate_where_clause()."""

    def test_prefix_and_condition_count(self):
        rng = random.Random(1)
        for _ in range(200):
            clause = generate_where_clause(rng, FIXED_NOW)

            assert clause.startswith("WHERE ")
            assert 4 <= _condition_count(clause) <= 8

    def test_date_range_ends_at_now(self):
        rng = random.Random(2)
        clauses = [generate_where_clause(rng, FIXED_NOW) for _ in range(200)]
        with_range = [c for c in clauses if "BETWEEN" in c]

        assert with_range
        for clause in with_range:
            assert "AND '2024-05-01 12:00:00'" in clause

    def test_sampling_with_replacement_allows_duplicates(self):
        """Across many clauses at least one repeats a condition template."""
        rng = random.Random(3)
        repeated = False
        for _ in range(200):
            clause = generate_where_clause(rng, FIXED_NOW)
            if clause.count("age >") > 1 or clause.count("department =") > 1:
                repeated = True
                break

        assert repeated


class TestSelectColumns:
    """Tests for generate_select_cols()."""

    def test_select_columns_non_empty(self):
        rng = random.Random(4)
        for _ in range(200):
            cols = generate_select_cols(rng, SqlKind.SELECT).split(", ")

            assert 1 <= len(cols) < len(SELECT_COLUMNS)
            assert set(cols) <= set(SELECT_COLUMNS)

    @pytest.mark.parametrize(
        "kind", [SqlKind.INSERT, SqlKind.UPDATE, SqlKind.DELETE, SqlKind.ALTER]
    )
    def test_non_select_sentinel(self, kind):
        assert generate_select_cols(random.Random(5), kind) == "N/A"


class TestSqlTextSynthesizer:
    """Tests for SqlTextSynthesizer.generate_statement()."""

    def test_select_statement(self):
        statement = _synthesizer().generate_statement(SqlKind.SELECT)

        assert statement.sql_type == "SELECT"
        assert statement.select_cols != "N/A"
        assert statement.text.startswith(
            f"SELECT {statement.select_cols} FROM {statement.table} WHERE "
        )

    def test_insert_statement(self):
        statement = _synthesizer().generate_statement(SqlKind.INSERT)

        assert statement.select_cols == "N/A"
        assert re.fullmatch(
            rf"INSERT INTO {statement.table} \(id, name, age, salary\) "
            r"VALUES \(\d+, '[A-Za-z ]+', \d+, \d+\)",
            statement.text,
        )
        assert "WHERE" not in statement.text

    def test_update_statement(self):
        statement = _synthesizer().generate_statement(SqlKind.UPDATE)

        assert statement.text.startswith(f"UPDATE {statement.table} SET salary = ")
        assert " WHERE " in statement.text

    def test_delete_statement(self):
        statement = _synthesizer().generate_statement(SqlKind.DELETE)

        assert statement.text.startswith(f"DELETE FROM {statement.table} WHERE ")

    def test_alter_statement(self):
        statement = _synthesizer().generate_statement(SqlKind.ALTER)

        assert re.fullmatch(
            r"ALTER TABLE \w+ ADD COLUMN attribute0[123] (VARCHAR\(255\)|INT|DATE)",
            statement.text,
        )

    def test_sampled_statements_are_consistent(self):
        synthesizer = _synthesizer(6)
        for _ in range(500):
            statement = synthesizer.generate_statement()

            assert statement.table in TABLE_NAMES
            assert statement.table in statement.text
            assert statement.text.startswith(statement.sql_type)
            if statement.sql_type == "SELECT":
                assert statement.select_cols != "N/A"
            else:
                assert statement.select_cols == "N/A"
            assert "\t" not in statement.text
            assert "\n" not in statement.text

    def test_select_dominates_distribution(self):
        synthesizer = _synthesizer(7)
        counts = Counter(synthesizer.generate_statement().sql_type for _ in range(2000))

        assert counts.most_common(1)[0][0] == "SELECT"
        assert set(counts) == {k.value for k in SqlKind}

    def test_same_seed_same_statements(self):
        first = _synthesizer(8)
        second = _synthesizer(8)

        assert [first.generate_statement() for _ in range(20)] == [
            second.generate_statement() for _ in range(20)
        ]
