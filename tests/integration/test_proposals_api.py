from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from proposal_registry.core.config import get_settings
from proposal_registry.models import Proposal

Headers = Callable[[str], dict[str, str]]


def _create(client: TestClient, headers: dict[str, str], **payload: str) -> dict:
    body = {"title": "Fund the garden", "description": "Seeds and tools"}
    body.update(payload)
    response = client.post("/api/proposals", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_and_fetch_proposal(client: TestClient, headers_for: Headers) -> None:
    created = _create(client, headers_for("alice"))

    assert created["owner"] == "alice"
    assert created["voters"] == []
    assert created["yes_votes"] == 0
    assert created["no_votes"] == 0
    assert created["updated_at"] is None

    fetched = client.get(f"/api/proposals/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created

    listing = client.get("/api/proposals")
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [created["id"]]


def test_create_requires_authentication(client: TestClient) -> None:
    response = client.post("/api/proposals", json={"title": "T", "description": "D"})
    assert response.status_code in {401, 403}


def test_create_rejects_empty_fields(
    client: TestClient, headers_for: Headers, db_session: Session
) -> None:
    response = client.post(
        "/api/proposals",
        json={"title": "", "description": "D"},
        headers=headers_for("alice"),
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Missing required fields"
    assert db_session.query(Proposal).count() == 0


def test_missing_proposal_returns_404(client: TestClient) -> None:
    response = client.get("/api/proposals/does-not-exist")
    assert response.status_code == 404


def test_voting_flow(client: TestClient, headers_for: Headers) -> None:
    alice = headers_for("alice")
    bob = headers_for("bob")
    carol = headers_for("carol")
    proposal_id = _create(client, alice)["id"]

    first = client.post(f"/api/proposals/{proposal_id}/votes/yes", headers=bob)
    assert first.status_code == 200
    assert first.json()["yes_votes"] == 1
    assert first.json()["voters"] == ["bob"]
    assert first.json()["updated_at"] is not None

    duplicate = client.post(f"/api/proposals/{proposal_id}/votes/no", headers=bob)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "Already voted"

    own = client.post(f"/api/proposals/{proposal_id}/votes/yes", headers=alice)
    assert own.status_code == 403

    against = client.post(f"/api/proposals/{proposal_id}/votes/no", headers=carol)
    assert against.status_code == 200

    stored = client.get(f"/api/proposals/{proposal_id}").json()
    assert stored["yes_votes"] == 1
    assert stored["no_votes"] == 1
    assert stored["voters"] == ["bob", "carol"]


def test_vote_on_missing_proposal(client: TestClient, headers_for: Headers) -> None:
    response = client.post("/api/proposals/missing/votes/yes", headers=headers_for("bob"))
    assert response.status_code == 404


def test_update_is_owner_only(client: TestClient, headers_for: Headers) -> None:
    alice = headers_for("alice")
    created = _create(client, alice)
    proposal_id = created["id"]

    forbidden = client.put(
        f"/api/proposals/{proposal_id}",
        json={"title": "Hijacked", "description": "Nope"},
        headers=headers_for("bob"),
    )
    assert forbidden.status_code == 403
    assert client.get(f"/api/proposals/{proposal_id}").json()["title"] == created["title"]

    updated = client.put(
        f"/api/proposals/{proposal_id}",
        json={"title": "Fund the orchard", "description": "Trees too"},
        headers=alice,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["title"] == "Fund the orchard"
    assert body["description"] == "Trees too"
    assert body["updated_at"] is not None
    assert body["created_at"] == created["created_at"]


def test_update_rejects_empty_fields(client: TestClient, headers_for: Headers) -> None:
    alice = headers_for("alice")
    proposal_id = _create(client, alice)["id"]

    response = client.put(
        f"/api/proposals/{proposal_id}",
        json={"title": "Still here", "description": ""},
        headers=alice,
    )
    assert response.status_code == 422


def test_delete_returns_removed_proposal(client: TestClient, headers_for: Headers) -> None:
    created = _create(client, headers_for("alice"))

    # Deletion carries no ownership check unless owner-only mode is configured.
    response = client.delete(f"/api/proposals/{created['id']}", headers=headers_for("bob"))
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    assert client.get(f"/api/proposals/{created['id']}").status_code == 404
    again = client.delete(f"/api/proposals/{created['id']}", headers=headers_for("bob"))
    assert again.status_code == 404


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/api/healthz").json()["status"] == "ok"
    assert client.get("/api/readyz").json()["status"] == "ready"


def test_metrics_count_registry_outcomes(client: TestClient, headers_for: Headers) -> None:
    client.get("/api/proposals/unknown")

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert 'proposal_operations_total{operation="get_proposal",outcome="ProposalNotFoundError"}' in metrics.text


@pytest.fixture()
def owner_only_delete(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("RESTRICT_DELETE_TO_OWNER", "true")
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("RESTRICT_DELETE_TO_OWNER")
    get_settings.cache_clear()


@pytest.mark.usefixtures("owner_only_delete")
def test_owner_only_delete_mode_rejects_other_callers(
    client: TestClient, headers_for: Headers
) -> None:
    alice = headers_for("alice")
    created = _create(client, alice)
    proposal_id = created["id"]

    forbidden = client.delete(f"/api/proposals/{proposal_id}", headers=headers_for("bob"))
    assert forbidden.status_code == 403
    assert forbidden.json()["detail"] == "Only the owner of a proposal can delete it"
    assert client.get(f"/api/proposals/{proposal_id}").json() == created

    removed = client.delete(f"/api/proposals/{proposal_id}", headers=alice)
    assert removed.status_code == 200
    assert removed.json()["id"] == proposal_id
    assert client.get(f"/api/proposals/{proposal_id}").status_code == 404
