"""Public exports for the session package."""

from .controller import Action, SessionController
from .types import (
    Database,
    DataPage,
    IndexDescriptor,
    NavigationControls,
    PaginationInfo,
    QueryFailure,
    QueryResult,
    QuerySuccess,
    SessionState,
    Tab,
    TableColumn,
    TableSchema,
    TabularModel,
)

__all__ = [
    "Action",
    "DataPage",
    "Database",
    "IndexDescriptor",
    "NavigationControls",
    "PaginationInfo",
    "QueryFailure",
    "QueryResult",
    "QuerySuccess",
    "SessionController",
    "SessionState",
    "Tab",
    "TableColumn",
    "TableSchema",
    "TabularModel",
]
