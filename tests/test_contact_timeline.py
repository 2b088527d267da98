from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.main import app
from backend.app.models.activity import Activity
from backend.app.models.contact import Contact
from backend.app.models.contact_file import ContactFile
from backend.app.models.contact_property import ContactProperty
from backend.app.models.contact_status_change import ContactStatusChange
from backend.app.models.lead_status_change import LeadStatusChange
from backend.app.models.property import Property, PropertyStatusChange
from backend.app.services import contact_timeline


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, password: str) -> str:
    client.post("/auth/register", json={"email": email, "password": password})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def at(day: int, hour: int = 12) -> datetime:
    return datetime(2025, 3, day, hour, 0, tzinfo=timezone.utc)


def seed(*rows) -> list[int]:
    with SessionLocal() as db:
        for row in rows:
            db.add(row)
        db.commit()
        return [row.id for row in rows]


def seed_contact(name: str = "Dana Buyer") -> int:
    return seed(Contact(name=name))[0]


def seed_linked_property(contact_id: int, role: str = "owner", title: str = "12 Palm Row") -> int:
    property_id = seed(Property(title=title, status="available"))[0]
    seed(ContactProperty(contact_id=contact_id, property_id=property_id, role=role))
    return property_id


def get_timeline(client: TestClient, token: str, contact_id: int, **params):
    return client.get(f"/contacts/{contact_id}/timeline", params=params, headers={"Authorization": f"Bearer {token}"})


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_timeline_merges_sources_newest_first():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    property_id = seed_linked_property(contact_id)
    seed(
        Activity(lead_id=contact_id, type="call", description="Intro call", created_at=at(1)),
        Activity(lead_id=contact_id, type="email", description="Sent brochure", created_at=at(4)),
        ContactFile(contact_id=contact_id, name="passport.pdf", tag="id", created_at=at(2)),
        PropertyStatusChange(property_id=property_id, old_status="available", new_status="pending", created_at=at(3)),
    )

    resp = get_timeline(client, token, contact_id)
    assert resp.status_code == 200
    items = resp.json()
    assert [item["type"] for item in items] == ["activity", "property_change", "file_upload", "activity"]
    assert [item["title"] for item in items] == [
        "Sent brochure",
        "Property status changed to pending",
        "Uploaded passport.pdf",
        "Intro call",
    ]
    assert [item["subtitle"] for item in items] == ["email", "from available", "id", "call"]
    timestamps = [parse_ts(item["timestamp"]) for item in items]
    assert timestamps == sorted(timestamps, reverse=True)


def test_timeline_is_exact_union_of_all_five_sources():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    other_id = seed_contact("Other Person")
    property_id = seed_linked_property(contact_id)
    other_property_id = seed_linked_property(other_id, title="9 Dock Lane")

    ids = {}
    ids["status_change"] = seed(
        ContactStatusChange(contact_id=contact_id, old_status="active", new_status="past", reason="auto: recompute", created_at=at(5)),
    )
    ids["lead_change"] = seed(
        LeadStatusChange(lead_id=contact_id, old_status="new", new_status="contacted", created_at=at(6)),
        LeadStatusChange(lead_id=contact_id, old_status="contacted", new_status="qualified", created_at=at(7)),
    )
    ids["property_change"] = seed(
        PropertyStatusChange(property_id=property_id, old_status="available", new_status="sold", created_at=at(8)),
    )
    ids["activity"] = seed(Activity(lead_id=contact_id, type="meeting", description="Viewing", created_at=at(9)))
    ids["file_upload"] = seed(ContactFile(contact_id=contact_id, name=None, tag=None, created_at=at(10)))
    # Rows for another contact must not leak in
    seed(
        ContactStatusChange(contact_id=other_id, old_status="active", new_status="past", created_at=at(11)),
        LeadStatusChange(lead_id=other_id, old_status="new", new_status="lost", created_at=at(11)),
        PropertyStatusChange(property_id=other_property_id, old_status="available", new_status="rented", created_at=at(11)),
        Activity(lead_id=other_id, type="call", description="Other call", created_at=at(11)),
        ContactFile(contact_id=other_id, name="other.pdf", created_at=at(11)),
    )

    items = get_timeline(client, token, contact_id).json()
    keys = [(item["type"], item["id"]) for item in items]
    assert len(keys) == len(set(keys)) == 6
    expected = {(kind, row_id) for kind, row_ids in ids.items() for row_id in row_ids}
    assert set(keys) == expected

    file_item = next(item for item in items if item["type"] == "file_upload")
    assert file_item["title"] == "Uploaded document"
    assert file_item["subtitle"] == "document"
    status_item = next(item for item in items if item["type"] == "status_change")
    assert status_item["title"] == "Contact status changed to past"
    assert status_item["subtitle"] == "auto: recompute"
    assert status_item["data"]["old_status"] == "active"


def test_contact_without_properties_skips_property_history_query(monkeypatch):
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    seed(Activity(lead_id=contact_id, type="call", description="Hello", created_at=at(1)))
    calls = []

    def recording_fetch(db, property_ids):
        calls.append(property_ids)
        return []

    monkeypatch.setattr(contact_timeline, "fetch_property_status_changes", recording_fetch)

    resp = get_timeline(client, token, contact_id)
    assert resp.status_code == 200
    assert len(resp.json()) == 1
    assert calls == []


def test_property_linked_under_two_roles_is_listed_once():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    property_id = seed_linked_property(contact_id, role="owner")
    seed(ContactProperty(contact_id=contact_id, property_id=property_id, role="investor"))
    seed(PropertyStatusChange(property_id=property_id, old_status="available", new_status="pending", created_at=at(2)))

    items = get_timeline(client, token, contact_id).json()
    assert [item["type"] for item in items] == ["property_change"]


@pytest.mark.parametrize(
    "fetcher",
    [
        "fetch_contact",
        "fetch_contact_status_changes",
        "fetch_lead_status_changes",
        "fetch_linked_property_ids",
        "fetch_property_status_changes",
        "fetch_activities",
        "fetch_contact_files",
    ],
)
def test_any_failing_source_fails_the_whole_timeline(monkeypatch, fetcher):
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    property_id = seed_linked_property(contact_id)
    seed(
        ContactStatusChange(contact_id=contact_id, old_status="active", new_status="past", created_at=at(1)),
        ContactFile(contact_id=contact_id, name="deed.pdf", created_at=at(2)),
        PropertyStatusChange(property_id=property_id, old_status="available", new_status="sold", created_at=at(3)),
    )

    def broken_fetch(*args):
        raise OperationalError(f"SELECT for {fetcher}", {}, Exception("connection reset"))

    monkeypatch.setattr(contact_timeline, fetcher, broken_fetch)

    resp = get_timeline(client, token, contact_id)
    assert resp.status_code == 503
    assert resp.json() == {"detail": "Something went wrong. Please try again.", "retryable": True}


def test_equal_timestamps_keep_source_order():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    same = at(3)
    seed(
        ContactFile(contact_id=contact_id, name="a.pdf", created_at=same),
        Activity(lead_id=contact_id, type="call", description="Call", created_at=same),
        LeadStatusChange(lead_id=contact_id, old_status="new", new_status="contacted", created_at=same),
        ContactStatusChange(contact_id=contact_id, old_status="active", new_status="past", created_at=same),
    )

    items = get_timeline(client, token, contact_id).json()
    assert [item["type"] for item in items] == ["status_change", "lead_change", "activity", "file_upload"]


def test_timeline_limit_applies_after_merge():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    seed(
        Activity(lead_id=contact_id, type="call", description="Oldest", created_at=at(1)),
        ContactFile(contact_id=contact_id, name="newest.pdf", created_at=at(9)),
        Activity(lead_id=contact_id, type="call", description="Middle", created_at=at(5)),
    )

    items = get_timeline(client, token, contact_id, limit=2).json()
    assert [item["title"] for item in items] == ["Uploaded newest.pdf", "Middle"]


def test_manual_override_shows_up_on_timeline():
    client = TestClient(app)
    admin_token = register_and_login(client, "admin@example.com", "secret")
    contact_id = seed_contact()
    headers = {"Authorization": f"Bearer {admin_token}"}

    client.put(f"/contacts/{contact_id}/status/mode", json={"mode": "manual"}, headers=headers)
    client.put(f"/contacts/{contact_id}/status/manual", json={"status": "past"}, headers=headers)

    items = get_timeline(client, admin_token, contact_id).json()
    assert len(items) == 1
    assert items[0]["type"] == "status_change"
    assert items[0]["title"] == "Contact status changed to past"
    assert items[0]["subtitle"] == "manual override"


def test_timeline_unknown_contact_returns_404():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    assert get_timeline(client, token, 12345).status_code == 404


def test_timeline_requires_auth():
    client = TestClient(app)
    contact_id = seed_contact()
    assert client.get(f"/contacts/{contact_id}/timeline").status_code == 401


def test_empty_timeline_is_empty_list():
    client = TestClient(app)
    token = register_and_login(client, "agent@example.com", "secret")
    contact_id = seed_contact()
    resp = get_timeline(client, token, contact_id)
    assert resp.status_code == 200
    assert resp.json() == []
