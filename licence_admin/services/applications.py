from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Tuple
from urllib.parse import quote

from licence_admin.models.application import (
    ApplicationQuery,
    ApplicationStats,
    ApplicationsPage,
    ApplicationUpdate,
)
from licence_admin.services.http_client import ApiClient

"""Typed access to the applications endpoints.

Endpoints:
    - GET /applications            -> paginated, filtered, sorted list
    - GET /applications/stats      -> {stats: {total, pending, approved, rejected}}
    - PUT /applications/{id}       -> partial update, returns updated record

Errors are not handled here: ApiRequestFailed propagates so the caller can
show it, the same way the dashboard surfaced a connection error banner.
"""

logger = logging.getLogger("licence_admin.applications")


class ApplicationsService:
    def __init__(self, api: ApiClient):
        self._api = api

    async def list_applications(
        self, query: ApplicationQuery | None = None
    ) -> ApplicationsPage:
        query = query or ApplicationQuery()
        data = await self._api.get("/applications", query.to_params())
        if not isinstance(data, dict):
            logger.warning("unexpected list body type %s", type(data).__name__)
            data = {}
        return ApplicationsPage.model_validate(data)

    async def get_stats(self) -> ApplicationStats:
        data = await self._api.get("/applications/stats")
        stats = data.get("stats") if isinstance(data, dict) else None
        return ApplicationStats.model_validate(stats or {})

    async def update_application(
        self,
        application_id: str | int,
        changes: ApplicationUpdate | Mapping[str, Any],
    ) -> Dict[str, Any]:
        if not isinstance(changes, ApplicationUpdate):
            # None stands for "not provided": drop it before validation
            changes = ApplicationUpdate.model_validate(
                {k: v for k, v in changes.items() if v is not None}
            )
        payload = changes.to_payload()
        path = f"/applications/{quote(str(application_id), safe='')}"
        updated = await self._api.put(path, payload)
        logger.info(
            "application %s updated (%s)", application_id, ", ".join(sorted(payload))
        )
        return updated

    async def refresh(
        self, query: ApplicationQuery | None = None
    ) -> Tuple[ApplicationsPage, ApplicationStats]:
        """Fetch the list and the stats concurrently."""
        page, stats = await asyncio.gather(
            self.list_applications(query), self.get_stats()
        )
        return page, stats
