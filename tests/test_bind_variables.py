"""
Unit tests for WHERE-clause literal extraction.
"""

from sqllog_synth.core.bind_variables import extract_bind_values


class TestExtractBindValues:
    """Tests for extract_bind_values()."""

    def test_numbers_and_strings_in_order(self):
        sql = "SELECT * FROM users WHERE age > 30 AND name = 'Bob'"
        assert extract_bind_values(sql) == "30, 'Bob'"

    def test_no_where_clause(self):
        assert extract_bind_values("INSERT INTO t VALUES (1)") == ""

    def test_where_without_literals(self):
        assert extract_bind_values("SELECT * FROM t WHERE a = b") == ""

    def test_keyword_is_case_insensitive(self):
        assert extract_bind_values("select * from t where id = 5") == "5"

    def test_only_literals_after_where(self):
        """Literals in the SET clause are not bind values."""
        sql = "UPDATE users SET salary = 5000 WHERE age > 20"
        assert extract_bind_values(sql) == "20"

    def test_signed_and_decimal_numbers(self):
        sql = "SELECT * FROM t WHERE a = -3 AND b = 2.50 AND c = +7"
        assert extract_bind_values(sql) == "-3, 2.50, +7"

    def test_duplicates_are_kept(self):
        sql = "SELECT * FROM t WHERE a = 1 AND a = 1"
        assert extract_bind_values(sql) == "1, 1"

    def test_like_pattern_and_date_range(self):
        sql = (
            "SELECT * FROM events WHERE name LIKE 'A%' AND event_date BETWEEN "
            "'2024-01-01 00:00:00' AND '2024-01-02 00:00:00'"
        )
        assert extract_bind_values(sql) == (
            "'A%', '2024-01-01 00:00:00', '2024-01-02 00:00:00'"
        )

    def test_escaped_quotes_not_supported(self):
        """A doubled quote closes the literal; the remainder is a new literal."""
        sql = "SELECT * FROM t WHERE name = 'O''Brien'"
        assert extract_bind_values(sql) == "'O', 'Brien'"

    def test_non_ascii_text_before_where(self):
        """Characters whose upper case is longer do not shift the WHERE position."""
        sql = "SELECT * FROM straßeßßßß WHERE 12 = id"
        assert extract_bind_values(sql) == "12"
