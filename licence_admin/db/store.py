"""In-memory application store backing the reference backend.

Responsibilities
----------------
- Hold application records keyed by ``application_id``.
- Filter, sort and paginate listings the way the admin dashboard requests them.
- Apply partial updates and compute status counts.

Data lives for the lifetime of the process only.
"""

from __future__ import annotations

import math
import random
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from licence_admin.models.constants import SEARCH_FIELDS, STATS_STATUSES

_FIRST_NAMES = ["Amal", "Nimali", "Kasun", "Dilini", "Ruwan", "Sanduni", "Tharindu", "Ishara"]
_LAST_NAMES = ["Perera", "Fernando", "Silva", "Jayasinghe", "Bandara", "Wijesinghe"]
_HOSPITALS = ["General Hospital", "City Medical Centre", "Lakeside Clinic"]
_BLOOD_GROUPS = ["A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-"]
_SEED_STATUSES = ["pending", "submitted", "approved", "rejected"]


def make_application(index: int, rng: random.Random, base_time: datetime) -> Dict[str, Any]:
    first = rng.choice(_FIRST_NAMES)
    last = rng.choice(_LAST_NAMES)
    issued = date(2025, 1, 1) + timedelta(days=rng.randrange(0, 300))
    return {
        "id": index,
        "application_id": f"APP-{index:05d}",
        "full_name": f"{first} {last}",
        "email": f"{first.lower()}.{last.lower()}{index}@example.com",
        "phone": f"07{rng.randrange(10_000_000, 99_999_999)}",
        "date_of_birth": (date(1960, 1, 1) + timedelta(days=rng.randrange(0, 16000))).isoformat(),
        "gender": rng.choice(["male", "female"]),
        "blood_group": rng.choice(_BLOOD_GROUPS),
        "medical_certificate_id": f"MC-{index:05d}",
        "doctor_name": f"Dr. {rng.choice(_LAST_NAMES)}",
        "hospital": rng.choice(_HOSPITALS),
        "issued_date": issued.isoformat(),
        "expiry_date": (issued + timedelta(days=365)).isoformat(),
        "is_fit_to_drive": rng.random() > 0.1,
        "vision": rng.choice(["normal", "corrected"]),
        "hearing": "normal",
        "remarks": None,
        "payment_reference_id": f"PAY-{index:05d}",
        "photo_url": None,
        "status": _SEED_STATUSES[index % len(_SEED_STATUSES)],
        "admin_status": "unverified",
        "created_at": (base_time - timedelta(hours=index)).isoformat(),
    }


def seed_records(count: int, seed: int = 7) -> List[Dict[str, Any]]:
    rng = random.Random(seed)
    base_time = datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)
    return [make_application(i, rng, base_time) for i in range(1, count + 1)]


def _sort_key(field: str):
    def key(record: Dict[str, Any]) -> Tuple[bool, Any]:
        value = record.get(field)
        if isinstance(value, str):
            value = value.lower()
        # Missing values sort first in ASC order
        return (value is not None, value if value is not None else "")

    return key


class ApplicationStore:
    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        for r in records or []:
            self._records[str(r["application_id"])] = dict(r)

    def __len__(self) -> int:
        return len(self._records)

    def list_applications(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "DESC",
    ) -> Dict[str, Any]:
        rows = list(self._records.values())
        if status:
            rows = [r for r in rows if r.get("status") == status]
        if search:
            needle = search.strip().lower()
            rows = [
                r
                for r in rows
                if any(needle in str(r.get(f) or "").lower() for f in SEARCH_FIELDS)
            ]
        rows.sort(key=_sort_key(sort_by), reverse=sort_order.upper() == "DESC")

        total_items = len(rows)
        total_pages = max(1, math.ceil(total_items / limit))
        start = (page - 1) * limit
        return {
            "applications": [dict(r) for r in rows[start : start + limit]],
            "totalPages": total_pages,
            "totalItems": total_items,
        }

    def get_application(self, application_id: str) -> Optional[Dict[str, Any]]:
        row = self._records.get(application_id)
        return dict(row) if row else None

    def update_application(self, application_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        row = self._records.get(application_id)
        if row is None:
            raise KeyError(application_id)
        row.update(changes)
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        return dict(row)

    def stats(self) -> Dict[str, int]:
        counts = {s: 0 for s in STATS_STATUSES}
        for r in self._records.values():
            if r.get("status") in counts:
                counts[r["status"]] += 1
        return {"total": len(self._records), **counts}
