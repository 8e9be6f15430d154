from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from licence_admin.db.store import ApplicationStore
from licence_admin.models.application import ApplicationQuery, ApplicationUpdate
from licence_admin.models.constants import PAGE_SIZES

"""Applications router for the reference backend.

Endpoints:
    - GET /applications                  -> {applications, totalPages, totalItems}
    - GET /applications/stats            -> {stats: {total, pending, approved, rejected}}
    - PUT /applications/{application_id} -> updated record
"""

router = APIRouter(prefix="/applications", tags=["applications"])


# Dependencies -----------------------------------------------------


def get_store(request: Request) -> ApplicationStore:
    return request.app.state.store


# Routes -----------------------------------------------------------
@router.get("", summary="List applications with filters, sorting and pagination")
async def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, description=f"Page size, one of {PAGE_SIZES}"),
    status: str = Query("", description="Filter by exact status"),
    search: str = Query("", description="Search name, email, phone or id"),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("DESC", alias="sortOrder"),
    store: ApplicationStore = Depends(get_store),
) -> Dict[str, Any]:
    # 1. Validate using the same rules the client applies
    try:
        query = ApplicationQuery(
            page=page,
            limit=limit,
            status=status,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=_first_error(e)) from e
    # 2. Fetch
    return store.list_applications(
        page=query.page,
        limit=query.limit,
        status=query.status or None,
        search=query.search or None,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
    )


@router.get("/stats", summary="Application counts by status")
async def application_stats(
    store: ApplicationStore = Depends(get_store),
) -> Dict[str, Any]:
    return {"stats": store.stats()}


@router.put("/{application_id}", summary="Update an application (partial)")
async def update_application(
    application_id: str,
    payload: ApplicationUpdate,
    store: ApplicationStore = Depends(get_store),
) -> Dict[str, Any]:
    try:
        return store.update_application(application_id, payload.to_payload())
    except KeyError:
        raise HTTPException(
            status_code=404, detail=f"application {application_id} not found"
        )


def _first_error(exc: ValueError) -> str:
    errors = getattr(exc, "errors", None)
    if callable(errors):
        first = errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ()))
        return f"{loc}: {first['msg']}" if loc else first["msg"]
    return str(exc)
