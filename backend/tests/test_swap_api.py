"""HTTP tests for the swap routes: payloads and error-to-status mapping."""
import sys
from pathlib import Path

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest

from skillswap.infra.db.repositories.swap_repo import SwapRepositoryImpl

API = "/v1"


async def _user(client, email, name):
    response = await client.post(f"{API}/users", json={"email": email, "name": name, "skills": []})
    assert response.status_code == 201
    return response.json()["id"]


def _as(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture
async def swap_setup(client):
    """Owner, responder and outsider plus one request with one pending interaction."""
    owner = await _user(client, "owner@skillswap.dev", "Owner")
    responder = await _user(client, "responder@skillswap.dev", "Responder")
    outsider = await _user(client, "outsider@skillswap.dev", "Outsider")

    response = await client.post(
        f"{API}/swap-requests",
        json={"service_title": "Spanish tutoring", "service_required": "Logo design", "categories": ["Language"]},
        headers=_as(owner),
    )
    assert response.status_code == 201
    request_id = response.json()["id"]

    response = await client.post(
        f"{API}/swap-requests/{request_id}/interactions",
        json={"message": "Happy to trade"},
        headers=_as(responder),
    )
    assert response.status_code == 201
    return {
        "owner": owner,
        "responder": responder,
        "outsider": outsider,
        "request_id": request_id,
        "interaction_id": response.json()["id"],
    }


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_identity_header_required(client):
    response = await client.post(
        f"{API}/swap-requests", json={"service_title": "a", "service_required": "b"}
    )
    assert response.status_code == 401
    response = await client.get(f"{API}/sent-swap-requests", headers=_as("nobody"))
    assert response.status_code == 401


async def test_create_and_fetch_interaction(client, swap_setup):
    response = await client.get(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}", headers=_as(swap_setup["owner"])
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["updates"] == []
    assert data["message"] == "Happy to trade"
    assert data["swap_request_id"] == swap_setup["request_id"]


async def test_unknown_interaction_is_404(client, swap_setup):
    response = await client.get(f"{API}/swap-request-interactions/missing", headers=_as(swap_setup["owner"]))
    assert response.status_code == 404


async def test_append_update_and_status_flow(client, swap_setup):
    iid = swap_setup["interaction_id"]

    response = await client.post(
        f"{API}/swap-request-interactions/{iid}/updates",
        json={"message": "Started work", "percentage": 10},
        headers=_as(swap_setup["responder"]),
    )
    assert response.status_code == 201
    assert response.json()["percentage"] == 10

    response = await client.put(
        f"{API}/swap-request-interactions/{iid}/status",
        json={"status": "accepted"},
        headers=_as(swap_setup["owner"]),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert len(response.json()["updates"]) == 1

    response = await client.put(
        f"{API}/swap-request-interactions/{iid}/reject", headers=_as(swap_setup["owner"])
    )
    assert response.status_code == 409
    body = response.json()
    assert body["retryable"] is False
    assert body["current"] == "accepted"

    response = await client.get(f"{API}/swap-requests/{swap_setup['request_id']}", headers=_as(swap_setup["owner"]))
    assert response.json()["request_status"] == "In Progress"


async def test_invalid_status_value_is_422(client, swap_setup):
    response = await client.put(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}/status",
        json={"status": "finished"},
        headers=_as(swap_setup["owner"]),
    )
    assert response.status_code == 422


async def test_non_owner_decision_is_403(client, swap_setup):
    response = await client.put(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}/approve",
        headers=_as(swap_setup["responder"]),
    )
    assert response.status_code == 403


async def test_out_of_range_percentage_is_422(client, swap_setup):
    response = await client.post(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}/updates",
        json={"message": "Too far", "percentage": 150},
        headers=_as(swap_setup["responder"]),
    )
    assert response.status_code == 422


async def test_idempotency_key_header_prevents_double_append(client, swap_setup):
    iid = swap_setup["interaction_id"]
    headers = {**_as(swap_setup["responder"]), "Idempotency-Key": "retry-1"}

    first = await client.post(
        f"{API}/swap-request-interactions/{iid}/updates", json={"message": "Sent draft"}, headers=headers
    )
    second = await client.post(
        f"{API}/swap-request-interactions/{iid}/updates", json={"message": "Sent draft"}, headers=headers
    )
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["id"] == second.json()["id"]

    response = await client.get(f"{API}/swap-request-interactions/{iid}", headers=headers)
    assert len(response.json()["updates"]) == 1


async def test_complete_flow(client, swap_setup):
    iid = swap_setup["interaction_id"]

    response = await client.put(f"{API}/swap-request-interactions/{iid}/complete", headers=_as(swap_setup["owner"]))
    assert response.status_code == 422

    await client.put(f"{API}/swap-request-interactions/{iid}/approve", headers=_as(swap_setup["owner"]))
    response = await client.put(
        f"{API}/swap-request-interactions/{iid}/complete", headers=_as(swap_setup["responder"])
    )
    assert response.status_code == 200
    assert response.json()["request_status"] == "Completed"
    assert response.json()["completed_at"] is not None

    response = await client.get(f"{API}/swap-request-interactions/{iid}", headers=_as(swap_setup["owner"]))
    data = response.json()
    assert data["status"] == "accepted"
    assert data["updates"][-1]["message"] == "Swap request marked as completed"
    assert data["updates"][-1]["user_id"] is None


async def test_sent_and_received_lists(client, swap_setup):
    sent = await client.get(f"{API}/sent-swap-requests", headers=_as(swap_setup["responder"]))
    assert [i["id"] for i in sent.json()] == [swap_setup["interaction_id"]]

    received = await client.get(f"{API}/received-swap-requests", headers=_as(swap_setup["owner"]))
    assert [i["id"] for i in received.json()] == [swap_setup["interaction_id"]]

    listed = await client.get(
        f"{API}/swap-requests/{swap_setup['request_id']}/interactions", headers=_as(swap_setup["outsider"])
    )
    assert listed.status_code == 200
    assert len(listed.json()) == 1


async def test_cancel_request(client, swap_setup):
    url = f"{API}/swap-requests/{swap_setup['request_id']}/cancel"
    assert (await client.put(url, headers=_as(swap_setup["responder"]))).status_code == 403

    response = await client.put(url, headers=_as(swap_setup["owner"]))
    assert response.status_code == 200
    assert response.json()["request_status"] == "Cancelled"

    response = await client.post(
        f"{API}/swap-requests/{swap_setup['request_id']}/interactions",
        json={"message": "Too late?"},
        headers=_as(swap_setup["outsider"]),
    )
    assert response.status_code == 422


async def test_duplicate_email_is_422(client):
    await _user(client, "dup@skillswap.dev", "First")
    response = await client.post(f"{API}/users", json={"email": "dup@skillswap.dev", "name": "Second"})
    assert response.status_code == 422


async def test_lost_race_is_retryable_409(client, swap_setup, monkeypatch):
    async def lost_race(self, *args, **kwargs):
        return None

    monkeypatch.setattr(SwapRepositoryImpl, "transition_interaction", lost_race)
    response = await client.put(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}/approve",
        headers=_as(swap_setup["owner"]),
    )
    assert response.status_code == 409
    assert response.json()["retryable"] is True


async def test_update_on_unknown_interaction_is_404(client, swap_setup):
    response = await client.post(
        f"{API}/swap-request-interactions/missing/updates",
        json={"message": "Hello?"},
        headers=_as(swap_setup["responder"]),
    )
    assert response.status_code == 404


async def test_empty_idempotency_key_appends_each_time(client, swap_setup):
    iid = swap_setup["interaction_id"]
    headers = {**_as(swap_setup["responder"]), "Idempotency-Key": ""}

    first = await client.post(f"{API}/swap-request-interactions/{iid}/updates", json={"message": "a"}, headers=headers)
    second = await client.post(f"{API}/swap-request-interactions/{iid}/updates", json={"message": "b"}, headers=headers)
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["id"] != second.json()["id"]


async def test_accept_on_cancelled_request_is_422(client, swap_setup):
    await client.put(f"{API}/swap-requests/{swap_setup['request_id']}/cancel", headers=_as(swap_setup["owner"]))
    response = await client.put(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}/approve",
        headers=_as(swap_setup["owner"]),
    )
    assert response.status_code == 422

    response = await client.get(
        f"{API}/swap-request-interactions/{swap_setup['interaction_id']}", headers=_as(swap_setup["owner"])
    )
    assert response.json()["status"] == "pending"


async def test_marketplace_listing(client, swap_setup):
    response = await client.get(f"{API}/swap-requests", headers=_as(swap_setup["owner"]))
    assert response.status_code == 200
    assert response.json() == []

    response = await client.get(f"{API}/swap-requests", headers=_as(swap_setup["responder"]))
    assert [r["id"] for r in response.json()] == [swap_setup["request_id"]]

    response = await client.get(
        f"{API}/swap-requests", params={"created_by": swap_setup["owner"]}, headers=_as(swap_setup["owner"])
    )
    assert [r["id"] for r in response.json()] == [swap_setup["request_id"]]


async def test_edit_swap_request(client, swap_setup):
    url = f"{API}/swap-requests/{swap_setup['request_id']}"

    response = await client.put(url, json={"service_title": "Hijack"}, headers=_as(swap_setup["responder"]))
    assert response.status_code == 403

    response = await client.put(
        url,
        json={"service_description": "Weekly, online", "categories": ["Language", "Online"]},
        headers=_as(swap_setup["owner"]),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["service_title"] == "Spanish tutoring"
    assert data["service_description"] == "Weekly, online"
    assert data["categories"] == ["Language", "Online"]

    await client.put(f"{url}/cancel", headers=_as(swap_setup["owner"]))
    response = await client.put(url, json={"service_title": "Too late"}, headers=_as(swap_setup["owner"]))
    assert response.status_code == 422
