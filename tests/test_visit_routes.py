"""Tests for the page-view tracking endpoint."""

import pytest
from fastapi.testclient import TestClient

from portfolio_api.adapters.geo.ip_api import GeoInfo
from portfolio_api.adapters.storage.base import AbstractVisitStore, VisitRecord
from portfolio_api.api.dependencies import get_visit_service
from portfolio_api.core.config import EmailSettings
from portfolio_api.main import app
from portfolio_api.services.visit_service import VisitService

from tests.fakes import FakeEmailSender


class StubGeoLocator:
    def __init__(self, geo: GeoInfo) -> None:
        self.geo = geo
        self.looked_up: list[str] = []

    async def lookup(self, ip: str) -> GeoInfo:
        self.looked_up.append(ip)
        return self.geo


class MemoryVisitStore(AbstractVisitStore):
    def __init__(self) -> None:
        self.visits: list[VisitRecord] = []

    async def record_visit(self, visit: VisitRecord) -> int | None:
        self.visits.append(visit)
        return sum(1 for v in self.visits if v.slug == visit.slug)


@pytest.fixture
def geo() -> StubGeoLocator:
    return StubGeoLocator(
        GeoInfo(status="success", query="1.2.3.4", city="Lisbon", country="Portugal")
    )


@pytest.fixture
def store() -> MemoryVisitStore:
    return MemoryVisitStore()


@pytest.fixture
def client(fake_sender: FakeEmailSender, geo: StubGeoLocator, store: MemoryVisitStore):
    email_settings = EmailSettings(api_key="k", to_email="owner@example.com")
    app.dependency_overrides[get_visit_service] = lambda: VisitService(
        geo_locator=geo,
        store=store,
        sender_factory=lambda: fake_sender,
        email_settings=email_settings,
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_visit_is_tracked_and_notified(
    client: TestClient,
    fake_sender: FakeEmailSender,
    geo: StubGeoLocator,
    store: MemoryVisitStore,
) -> None:
    resp = client.post(
        "/v1/visits",
        json={"caseStudy": "Checkout Redesign", "page": "/work/checkout", "visitorCount": 3},
        headers={"X-Forwarded-For": "1.2.3.4, 10.0.0.1", "User-Agent": "Mozilla/5.0"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert geo.looked_up == ["1.2.3.4"]
    assert store.visits[0].slug == "checkout-redesign"
    assert store.visits[0].city == "Lisbon"

    email = fake_sender.sent[0]
    assert email.subject == "Portfolio Visit — Checkout Redesign"
    assert "Location: Lisbon, -, Portugal" in email.text_content
    assert "Visitor view count (this browser): 3" in email.text_content
    assert "Total views (all visitors): 1" in email.text_content
    assert "User Agent: mozilla/5.0" in email.text_content


def test_visit_falls_back_to_body_ip(client: TestClient, geo: StubGeoLocator) -> None:
    resp = client.post("/v1/visits", json={"page": "/", "ip": "5.5.5.5"})

    assert resp.status_code == 200
    assert geo.looked_up == ["5.5.5.5"]


def test_visit_without_any_ip_uses_unknown(client: TestClient, geo: StubGeoLocator) -> None:
    client.post("/v1/visits", json={"page": "/"})

    assert geo.looked_up == ["unknown"]


def test_visit_requires_page_or_case_study(client: TestClient, fake_sender: FakeEmailSender) -> None:
    resp = client.post("/v1/visits", json={"referrer": "https://example.com"})

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "missing_page"
    assert resp.json()["error"]["message"] == "Missing page or caseStudy"
    assert fake_sender.sent == []


def test_visit_invalid_json_returns_400(client: TestClient) -> None:
    resp = client.post(
        "/v1/visits",
        content=b"nope",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400


@pytest.mark.parametrize(
    "user_agent",
    [
        "Googlebot/2.1 (+http://www.google.com/bot.html)",
        "Mozilla/5.0 (compatible; bingpreview/2.0)",
        "Some-Crawler/1.0",
        "Mediapartners-Google",
    ],
)
def test_bot_user_agents_are_ignored(
    client: TestClient, fake_sender: FakeEmailSender, user_agent: str
) -> None:
    resp = client.post("/v1/visits", json={"page": "/", "userAgent": user_agent})

    assert resp.status_code == 204
    assert fake_sender.sent == []


def test_bot_detected_from_header(client: TestClient, fake_sender: FakeEmailSender) -> None:
    resp = client.post("/v1/visits", json={"page": "/"}, headers={"User-Agent": "Yahoo! Slurp"})

    assert resp.status_code == 204
    assert fake_sender.sent == []


def test_campaign_traffic_is_ignored(
    client: TestClient, fake_sender: FakeEmailSender, store: MemoryVisitStore
) -> None:
    resp = client.post("/v1/visits?utm_source=newsletter", json={"page": "/"})

    assert resp.status_code == 204
    assert store.visits == []
    assert fake_sender.sent == []


def test_missing_page_checked_before_bot_filter(client: TestClient) -> None:
    resp = client.post("/v1/visits", json={"userAgent": "Googlebot/2.1"})

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "missing_page"


def test_user_agent_from_body_kept_as_sent(
    client: TestClient, fake_sender: FakeEmailSender, store: MemoryVisitStore
) -> None:
    client.post(
        "/v1/visits",
        json={"page": "/", "userAgent": "Mozilla/5.0 (X11)"},
        headers={"User-Agent": "Other/1.0"},
    )

    assert store.visits[0].user_agent == "Mozilla/5.0 (X11)"
    assert "User Agent: Mozilla/5.0 (X11)" in fake_sender.sent[0].text_content


def test_user_agent_header_fallback_is_lowercased(client: TestClient, store: MemoryVisitStore) -> None:
    client.post("/v1/visits", json={"page": "/"}, headers={"User-Agent": "Mozilla/5.0 (Macintosh)"})

    assert store.visits[0].user_agent == "mozilla/5.0 (macintosh)"
