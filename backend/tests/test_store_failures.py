from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

import leapboard.db.session as session_module
from leapboard.engine.aggregation import parse_month
from leapboard.engine.errors import RegistryFetchError
from leapboard.engine.types import Participant
from leapboard.services.content import ContentService
from leapboard.services.reports import ReportService
from leapboard.services.store import DocumentStore


class _UnreachableSession:
    """Stands in for a session whose connection dropped mid-request."""

    def scalars(self, *args, **kwargs):
        raise SQLAlchemyError("connection lost")

    def get(self, *args, **kwargs):
        raise SQLAlchemyError("connection lost")

    def close(self):
        pass


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_fetch_all_wraps_driver_error():
    with pytest.raises(RegistryFetchError) as exc:
        DocumentStore(_UnreachableSession()).fetch_all("students")
    assert exc.value.collection == "students"
    assert isinstance(exc.value.__cause__, SQLAlchemyError)


def test_get_by_id_wraps_driver_error():
    with pytest.raises(RegistryFetchError) as exc:
        DocumentStore(_UnreachableSession()).get_by_id("schools", "sch-1")
    assert exc.value.collection == "schools"


def test_report_does_not_continue_on_failed_read():
    window = parse_month("2025-03", "UTC")
    with pytest.raises(RegistryFetchError):
        ReportService(_UnreachableSession()).build_organization_report("sch-1", window)


def test_content_listing_does_not_continue_on_failed_read():
    with pytest.raises(RegistryFetchError):
        ContentService(_UnreachableSession()).resolve_visible_content(
            Participant(id="p1", state="st-1"),
            datetime(2025, 3, 1, tzinfo=timezone.utc),
        )


@pytest.fixture()
def unreachable_store(client):
    def _override():
        yield _UnreachableSession()

    previous = client.app.dependency_overrides.get(session_module.get_db)
    client.app.dependency_overrides[session_module.get_db] = _override
    try:
        yield client
    finally:
        client.app.dependency_overrides[session_module.get_db] = previous


def test_report_endpoint_returns_503_envelope(unreachable_store, admin_headers):
    r = unreachable_store.get(
        "/admin/reports/organizations/sch-1?month=2025-03",
        headers={**admin_headers, "X-Request-ID": "rid-store-down"},
    )
    assert r.status_code == 503
    body = r.json()
    assert body["ok"] is False
    assert body["error_code"] == "registry_unavailable"
    assert body["request_id"] == "rid-store-down"
    assert r.headers["X-Request-ID"] == "rid-store-down"


def test_content_endpoint_returns_503_envelope(unreachable_store, token_for):
    r = unreachable_store.get("/content/visible", headers=_bearer(token_for("uid-anyone")))
    assert r.status_code == 503
    body = r.json()
    assert body["error_code"] == "registry_unavailable"
    assert body["request_id"]
