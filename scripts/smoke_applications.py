"""Smoke script for the applications client.

Demonstrates:
 1. Listing, filtering and sorting against the reference backend (in-process).
 2. Stats before and after a status update.
 3. Terminal failure message after retries against an unreachable host.

NOTE: This is a lightweight diagnostic and not a formal test. Backoff waits
are shortened so the failure case finishes quickly.
"""

import asyncio
import os
import sys
from pprint import pprint

import httpx


async def run():
    from licence_admin.core.config import Settings
    from licence_admin.core.errors import ApiRequestFailed
    from licence_admin.main import create_app
    from licence_admin.models import ApplicationQuery
    from licence_admin.services.applications import ApplicationsService
    from licence_admin.services.formatting import format_date, format_id
    from licence_admin.services.http_client import ApiClient

    settings = Settings(api_base_url="http://backend.local", seed_applications=25)
    backend = create_app(settings_override=settings)
    out = {}

    async with ApiClient.from_settings(
        settings, transport=httpx.ASGITransport(app=backend)
    ) as api:
        svc = ApplicationsService(api)
        query = ApplicationQuery(limit=5).with_filter("status", "pending")
        page, stats = await svc.refresh(query)
        out["pending_first_page"] = [
            (format_id(a.id), a.full_name, format_date(a.created_at))
            for a in page.applications
        ]
        out["pagination"] = page.pagination(query.page).model_dump()
        out["stats_before"] = stats.model_dump()

        target = page.applications[0]
        updated = await svc.update_application(
            target.application_id, {"status": "approved", "remarks": "smoke"}
        )
        out["updated"] = {k: updated[k] for k in ("application_id", "status", "remarks")}
        out["stats_after"] = (await svc.get_stats()).model_dump()

        by_name = await svc.list_applications(ApplicationQuery().toggle_sort("full_name"))
        out["sorted_by_name"] = [a.full_name for a in by_name.applications[:3]]

    async with ApiClient("http://127.0.0.1:9", backoff_ms=50, timeout_s=0.5) as dead:
        try:
            await dead.get("/applications")
        except ApiRequestFailed as e:
            out["unreachable"] = str(e)

    pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    asyncio.run(run())
