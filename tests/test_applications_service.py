import httpx
import pytest
from pydantic import ValidationError

from licence_admin.core.errors import ApiRequestFailed
from licence_admin.models import ApplicationQuery, ApplicationUpdate
from licence_admin.services.applications import ApplicationsService


@pytest.fixture
def svc(api):
    return ApplicationsService(api)


async def test_default_listing(svc):
    page = await svc.list_applications()

    assert page.total_items == 25
    assert page.total_pages == 3
    assert len(page.applications) == 10
    # newest first
    assert [a.id for a in page.applications[:3]] == [1, 2, 3]


async def test_last_page_and_pagination(svc):
    query = ApplicationQuery().with_page(3)
    page = await svc.list_applications(query)

    assert len(page.applications) == 5
    p = page.pagination(query.page)
    assert (p.current_page, p.total_pages, p.total_items) == (3, 3, 25)
    assert p.has_prev is True
    assert p.has_next is False


async def test_status_filter(svc):
    page = await svc.list_applications(ApplicationQuery(status="approved"))

    assert page.total_items == 6
    assert page.total_pages == 1
    assert {a.status for a in page.applications} == {"approved"}


async def test_search_matches_application_id(svc):
    page = await svc.list_applications(ApplicationQuery(search="app-00007"))

    assert [a.application_id for a in page.applications] == ["APP-00007"]


async def test_search_without_match_still_has_one_page(svc):
    page = await svc.list_applications(ApplicationQuery(search="zzz-nobody"))

    assert page.applications == []
    assert page.total_items == 0
    assert page.total_pages == 1


async def test_sort_toggle_round_trip(svc):
    asc = ApplicationQuery(limit=5).toggle_sort("id")
    page = await svc.list_applications(asc)
    assert [a.id for a in page.applications] == [1, 2, 3, 4, 5]

    desc = asc.toggle_sort("id")
    page = await svc.list_applications(desc)
    assert [a.id for a in page.applications] == [25, 24, 23, 22, 21]


async def test_stats(svc):
    stats = await svc.get_stats()

    assert stats.model_dump() == {"total": 25, "pending": 6, "approved": 6, "rejected": 6}


async def test_update_then_refresh(svc):
    updated = await svc.update_application(
        "APP-00004", ApplicationUpdate(status="approved", admin_status="verified")
    )
    assert updated["status"] == "approved"
    assert updated["admin_status"] == "verified"
    # untouched fields come back unchanged
    assert updated["application_id"] == "APP-00004"

    page, stats = await svc.refresh(ApplicationQuery(status="approved"))
    assert stats.approved == 7
    assert stats.pending == 5
    assert "APP-00004" in {a.application_id for a in page.applications}


async def test_update_from_mapping_drops_none(svc, store):
    before = store.get_application("APP-00002")

    await svc.update_application(
        "APP-00002", {"remarks": "eye test required", "hospital": None, "is_fit_to_drive": False}
    )

    after = store.get_application("APP-00002")
    assert after["remarks"] == "eye test required"
    assert after["is_fit_to_drive"] is False
    assert after["hospital"] == before["hospital"]


async def test_update_rejects_invalid_values_before_sending(svc, sleep):
    with pytest.raises(ValidationError):
        await svc.update_application("APP-00002", {"status": "archived"})
    with pytest.raises(ValidationError):
        await svc.update_application("APP-00002", {})
    assert sleep.delays == []


async def test_update_with_only_none_values_is_rejected_without_a_request(make_client, sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    service = ApplicationsService(make_client(handler))
    with pytest.raises(ValidationError, match="at least one"):
        await service.update_application("APP-00002", {"status": None, "remarks": None})

    assert calls == []
    assert sleep.delays == []


async def test_update_unknown_application_fails_after_retries(svc, sleep):
    with pytest.raises(ApiRequestFailed) as exc_info:
        await svc.update_application("APP-99999", {"status": "rejected"})

    assert str(exc_info.value) == (
        "API Request Failed after 3 attempts: application APP-99999 not found"
    )
    assert exc_info.value.status_code == 404
    assert sleep.delays == [1.0, 2.0]


async def test_list_with_backend_defaults_missing(make_client):
    client = make_client(lambda r: httpx.Response(200, json={"applications": None}))
    page = await ApplicationsService(client).list_applications()

    assert page.applications == []
    assert page.total_pages == 1
    assert page.total_items == 0


async def test_stats_default_to_zero(make_client):
    client = make_client(lambda r: httpx.Response(200, content=b""))
    stats = await ApplicationsService(client).get_stats()

    assert stats.model_dump() == {"total": 0, "pending": 0, "approved": 0, "rejected": 0}


async def test_listing_sends_dashboard_params(make_client):
    body = {
        "applications": [
            {"id": i, "application_id": f"APP-{i:05d}", "status": "approved"} for i in range(6, 11)
        ],
        "totalPages": 3,
        "totalItems": 25,
    }
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=body)

    client = make_client(handler)
    query = ApplicationQuery(limit=5).with_filter("status", "approved").with_page(2)
    page = await ApplicationsService(client).list_applications(query)

    assert dict(seen[0].url.params) == {
        "page": "2",
        "limit": "5",
        "status": "approved",
        "sortBy": "created_at",
        "sortOrder": "DESC",
    }
    assert len(page.applications) == 5
    assert page.pagination(2).has_next is True
