"""mortarQL query builders."""
from mortarql.query.clauses import (
    ConditionGroup,
    ConditionLeaf,
    ConditionNode,
    ConditionTree,
    JoinClause,
    OrderByItem,
    UnionClause,
)
from mortarql.query.delete import DeleteQueryBuilder
from mortarql.query.expression import Expression
from mortarql.query.factory import QueryFactory
from mortarql.query.insert import InsertQueryBuilder
from mortarql.query.pagination import Page
from mortarql.query.select import SelectQueryBuilder
from mortarql.query.subquery import (
    BuilderSubquery,
    CallbackSubquery,
    RawSubquery,
    Subquery,
    as_subquery,
)
from mortarql.query.update import UpdateQueryBuilder

__all__ = [
    "ConditionGroup",
    "ConditionLeaf",
    "ConditionNode",
    "ConditionTree",
    "JoinClause",
    "OrderByItem",
    "UnionClause",
    "Expression",
    "Subquery",
    "BuilderSubquery",
    "RawSubquery",
    "CallbackSubquery",
    "as_subquery",
    "SelectQueryBuilder",
    "InsertQueryBuilder",
    "UpdateQueryBuilder",
    "DeleteQueryBuilder",
    "Page",
    "QueryFactory",
]
