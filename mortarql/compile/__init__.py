"""mortarQL compilation layer: builder state → parameterized SQL."""
from mortarql.compile.base import CompiledSQL, QueryCompiler
from mortarql.compile.conditions import ConditionQuoter, ConditionTreeCompiler
from mortarql.compile.mariadb import MariaDBCompiler
from mortarql.compile.postgres import PostgresCompiler
from mortarql.compile.quoting import AnsiQuoter, BacktickQuoter, Quoter
from mortarql.compile.sqlite import SQLiteCompiler
from mortarql.compile.standard import StandardQueryCompiler

__all__ = [
    "CompiledSQL",
    "QueryCompiler",
    "StandardQueryCompiler",
    "ConditionQuoter",
    "ConditionTreeCompiler",
    "Quoter",
    "AnsiQuoter",
    "BacktickQuoter",
    "MariaDBCompiler",
    "PostgresCompiler",
    "SQLiteCompiler",
]
