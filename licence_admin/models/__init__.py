"""Pydantic domain models for the licence applications backend contract."""

from .constants import (
    STATUSES,
    ADMIN_STATUSES,
    SORT_FIELDS,
    SORT_ORDERS,
    PAGE_SIZES,
)  # re-export
from .application import (
    Application,
    ApplicationUpdate,
    ApplicationStats,
    ApplicationsPage,
    ApplicationQuery,
    Pagination,
)

__all__ = [
    "STATUSES",
    "ADMIN_STATUSES",
    "SORT_FIELDS",
    "SORT_ORDERS",
    "PAGE_SIZES",
    "Application",
    "ApplicationUpdate",
    "ApplicationStats",
    "ApplicationsPage",
    "ApplicationQuery",
    "Pagination",
]
