from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import ADMIN_STATUSES, PAGE_SIZES, SORT_FIELDS, SORT_ORDERS, STATUSES


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _datetime_to_date(v: Any) -> Any:
    # Backends often send full ISO timestamps for date-only fields
    if isinstance(v, str) and len(v) > 10 and v[4:5] == "-" and v[10:11] in ("T", " "):
        return v[:10]
    return v


class Application(BaseModel):
    """A driving-licence application as served by the backend.

    Unknown fields are kept so records can be passed back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: int
    application_id: str
    full_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None

    # Medical certificate
    medical_certificate_id: Optional[str] = None
    doctor_name: Optional[str] = None
    hospital: Optional[str] = None
    issued_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_fit_to_drive: bool = False
    vision: Optional[str] = None
    hearing: Optional[str] = None
    remarks: Optional[str] = None

    payment_reference_id: Optional[str] = None
    photo_url: Optional[str] = None

    status: str = "pending"
    admin_status: str = "unverified"
    created_at: Optional[datetime] = None

    @field_validator("application_id", mode="before")
    @classmethod
    def application_id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("date_of_birth", "issued_date", "expiry_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _datetime_to_date(_blank_to_none(v))


class ApplicationUpdate(BaseModel):
    """Partial update. Only fields that were set are sent to the backend."""

    model_config = ConfigDict(extra="forbid")

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    doctor_name: Optional[str] = None
    hospital: Optional[str] = None
    issued_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_fit_to_drive: Optional[bool] = None
    vision: Optional[str] = None
    hearing: Optional[str] = None
    remarks: Optional[str] = None
    status: Optional[str] = None
    admin_status: Optional[str] = None

    @field_validator("date_of_birth", "issued_date", "expiry_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _datetime_to_date(_blank_to_none(v))

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in STATUSES:
            raise ValueError("unsupported status")
        return v

    @field_validator("admin_status")
    @classmethod
    def valid_admin_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ADMIN_STATUSES:
            raise ValueError("unsupported admin status")
        return v

    @model_validator(mode="after")
    def at_least_one(self) -> "ApplicationUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self

    @model_validator(mode="after")
    def certificate_dates_ordered(self) -> "ApplicationUpdate":
        if self.issued_date and self.expiry_date and self.expiry_date < self.issued_date:
            raise ValueError("expiry_date cannot be before issued_date")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class ApplicationStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0

    @field_validator("total", "pending", "approved", "rejected", mode="before")
    @classmethod
    def none_is_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class Pagination(BaseModel):
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    has_prev: bool = False
    has_next: bool = False


class ApplicationsPage(BaseModel):
    """Body of ``GET /applications``."""

    model_config = ConfigDict(populate_by_name=True)

    applications: List[Application] = Field(default_factory=list)
    total_pages: int = Field(1, alias="totalPages")
    total_items: int = Field(0, alias="totalItems")

    @field_validator("applications", mode="before")
    @classmethod
    def none_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("total_pages", mode="before")
    @classmethod
    def at_least_one_page(cls, v: Any) -> Any:
        return v or 1

    @field_validator("total_items", mode="before")
    @classmethod
    def items_default(cls, v: Any) -> Any:
        return v or 0

    def pagination(self, page: int) -> Pagination:
        return Pagination(
            current_page=page,
            total_pages=self.total_pages,
            total_items=self.total_items,
            has_prev=page > 1,
            has_next=page < self.total_pages,
        )


class ApplicationQuery(BaseModel):
    """List state of the applications table: filters, sort and page.

    Instances are immutable; the ``with_*``/``toggle_sort`` helpers return
    new queries and reset to page 1 like the dashboard does.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page: int = Field(1, ge=1)
    limit: int = 10
    status: str = ""
    search: str = ""
    sort_by: str = Field("created_at", alias="sortBy")
    sort_order: str = Field("DESC", alias="sortOrder")

    @field_validator("limit")
    @classmethod
    def valid_limit(cls, v: int) -> int:
        if v not in PAGE_SIZES:
            raise ValueError(f"limit must be one of {PAGE_SIZES}")
        return v

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v and v not in STATUSES:
            raise ValueError("unsupported status")
        return v

    @field_validator("search")
    @classmethod
    def strip_search(cls, v: str) -> str:
        return v.strip()

    @field_validator("sort_by")
    @classmethod
    def valid_sort_by(cls, v: str) -> str:
        if v not in SORT_FIELDS:
            raise ValueError("unsupported sort column")
        return v

    @field_validator("sort_order", mode="before")
    @classmethod
    def valid_sort_order(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.upper()
        if v not in SORT_ORDERS:
            raise ValueError("sort order must be ASC or DESC")
        return v

    def _replace(self, **changes: Any) -> "ApplicationQuery":
        # Re-validate instead of model_copy, which skips validators
        return ApplicationQuery.model_validate({**self.model_dump(), **changes})

    def with_filter(self, name: str, value: Any) -> "ApplicationQuery":
        field = _QUERY_ALIASES.get(name, name)
        if field not in ApplicationQuery.model_fields:
            raise ValueError(f"unknown filter '{name}'")
        changes: Dict[str, Any] = {field: value}
        if field != "page":
            changes["page"] = 1
        return self._replace(**changes)

    def with_page(self, page: int) -> "ApplicationQuery":
        return self.with_filter("page", page)

    def toggle_sort(self, column: str) -> "ApplicationQuery":
        if self.sort_by == column and self.sort_order == "ASC":
            order = "DESC"
        else:
            order = "ASC"
        return self._replace(sort_by=column, sort_order=order, page=1)

    def to_params(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


_QUERY_ALIASES = {"sortBy": "sort_by", "sortOrder": "sort_order"}
