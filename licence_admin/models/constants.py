"""Domain constants and enumerations for validation.

Kept as plain sets, same as the values the admin dashboard offers.
"""

from typing import Set, Tuple

STATUSES: Set[str] = {"pending", "submitted", "approved", "rejected", "cancelled"}
ADMIN_STATUSES: Set[str] = {"unverified", "verified", "on_hold"}

# Columns the applications table can sort by
SORT_FIELDS: Set[str] = {"id", "full_name", "created_at", "status", "phone", "email"}
SORT_ORDERS: Set[str] = {"ASC", "DESC"}
PAGE_SIZES: Tuple[int, ...] = (5, 10, 20)

# Searched case-insensitively by the list endpoint
SEARCH_FIELDS: Tuple[str, ...] = ("full_name", "email", "phone", "application_id")

# Counted in /applications/stats next to the total
STATS_STATUSES: Tuple[str, ...] = ("pending", "approved", "rejected")
