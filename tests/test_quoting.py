"""Unit tests for identifier quoting and dialect resolution."""

from __future__ import annotations

import pytest

from mortarql.compile.quoting import AnsiQuoter, BacktickQuoter, is_quoted
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.errors import ConfigurationError

ANSI = AnsiQuoter()
BACKTICK = BacktickQuoter()


# ---------------------------------------------------------------------------
# Quoter
# ---------------------------------------------------------------------------


def test_ident_ansi_and_backtick():
    assert ANSI.ident("users") == '"users"'
    assert BACKTICK.ident("users") == "`users`"


def test_ident_doubles_embedded_quote_char():
    assert ANSI.ident('we"ird') == '"we""ird"'
    assert BACKTICK.ident("we`ird") == "`we``ird`"


def test_ident_is_idempotent_for_either_quote_style():
    assert ANSI.ident('"users"') == '"users"'
    assert ANSI.ident("`users`") == "`users`"
    assert BACKTICK.ident('"users"') == '"users"'


def test_ident_blank_is_empty():
    assert ANSI.ident("   ") == ""


def test_dotted_quotes_each_segment():
    assert ANSI.dotted("u.id") == '"u"."id"'
    assert BACKTICK.dotted("db.users.id") == "`db`.`users`.`id`"


def test_dotted_keeps_star():
    assert ANSI.dotted("*") == "*"
    assert ANSI.dotted("u.*") == '"u".*'


def test_table_with_optional_alias():
    assert ANSI.table_with_optional_alias("users") == '"users"'
    assert ANSI.table_with_optional_alias("users u") == '"users" AS "u"'
    assert BACKTICK.table_with_optional_alias("  users   u  ") == "`users` AS `u`"


def test_table_with_optional_alias_uses_first_two_words():
    assert ANSI.table_with_optional_alias("users u extra") == '"users" AS "u"'


def test_table_with_optional_alias_accepts_explicit_as():
    assert ANSI.table_with_optional_alias("users AS u") == '"users" AS "u"'
    assert BACKTICK.table_with_optional_alias("users as u") == "`users` AS `u`"


def test_is_quoted():
    assert is_quoted('"a"')
    assert is_quoted("`a`")
    assert not is_quoted('"a')
    assert not is_quoted('"')


# ---------------------------------------------------------------------------
# Dialect
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "name,expected",
    [
        ("sqlite", Dialect.SQLITE),
        ("SQLite", Dialect.SQLITE),
        ("postgres", Dialect.POSTGRES),
        ("postgresql", Dialect.POSTGRES),
        ("pgsql", Dialect.POSTGRES),
        ("mariadb", Dialect.MARIADB),
        ("mysql", Dialect.MARIADB),
    ],
)
def test_dialect_resolve_aliases(name, expected):
    assert Dialect.resolve(name) is expected


def test_dialect_resolve_passes_enum_through():
    assert Dialect.resolve(Dialect.POSTGRES) is Dialect.POSTGRES


def test_dialect_resolve_unknown_raises():
    with pytest.raises(ConfigurationError) as exc_info:
        Dialect.resolve("oracle")
    assert exc_info.value.setting == "dialect"
    assert "oracle" in str(exc_info.value)


def test_isolation_level_values_are_sql_phrases():
    assert IsolationLevel.READ_COMMITTED.value == "READ COMMITTED"
    assert IsolationLevel.SERIALIZABLE.value == "SERIALIZABLE"
