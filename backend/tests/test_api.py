import pytest
from fastapi.testclient import TestClient

from conftest import CREATOR_A, CREATOR_B, CREATOR_C
from creator_score.config import settings
from creator_score.dependencies import (
    get_decision_store,
    get_leaderboard_service,
    get_snapshot_store,
)
from creator_score.main import app
from creator_score.talent_client import BoostedProfiles

ADMIN_KEY = "test-admin-key"
UNKNOWN_UUID = "99999999-9999-4999-8999-999999999999"


@pytest.fixture
def client(service, decision_store, snapshot_store, monkeypatch):
    monkeypatch.setattr(settings, "snapshot_admin_api_key", ADMIN_KEY)
    app.dependency_overrides[get_leaderboard_service] = lambda: service
    app.dependency_overrides[get_decision_store] = lambda: decision_store
    app.dependency_overrides[get_snapshot_store] = lambda: snapshot_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_leaderboard(client) -> None:
    res = client.get("/api/v1/leaderboard")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 3
    assert body["complete"] is True
    assert [e["rank"] for e in body["entries"]] == [1, 2, 2]
    assert [e["reward_display"] for e in body["entries"]] == ["$480", "$160", "$160"]
    assert body["entries"][0]["is_undecided"] is True
    assert body["summary"]["total_pool"] == 800


def test_leaderboard_pagination(client) -> None:
    body = client.get("/api/v1/leaderboard", params={"page": 2, "per_page": 2}).json()
    assert [e["id"] for e in body["entries"]] == [CREATOR_C]
    assert body["total"] == 3
    assert body["page"] == 2


@pytest.mark.parametrize("params", [{"page": 0}, {"per_page": 0}, {"per_page": 501}])
def test_leaderboard_rejects_bad_paging(client, params) -> None:
    assert client.get("/api/v1/leaderboard", params=params).status_code == 422


def test_leaderboard_upstream_failure_is_502(client, fake_talent) -> None:
    fake_talent.fail_scores = True
    res = client.get("/api/v1/leaderboard")
    assert res.status_code == 502


def test_leaderboard_stats(client) -> None:
    body = client.get("/api/v1/leaderboard/stats").json()
    assert body == {"min_score": 100, "total_creators": 3, "eligible_creators": 3}


def test_creator_rewards(client) -> None:
    res = client.get(f"/api/v1/leaderboard/{CREATOR_B}")
    assert res.status_code == 200
    assert res.json()["rank"] == 2
    assert res.json()["reward_display"] == "$160"


def test_creator_rewards_not_found(client) -> None:
    assert client.get(f"/api/v1/leaderboard/{UNKNOWN_UUID}").status_code == 404


def test_creator_rewards_upstream_failure_is_502(client, service, monkeypatch) -> None:
    calls = []
    original = service.get_creator_rewards

    async def tracked(talent_uuid):
        calls.append(talent_uuid)
        return await original(talent_uuid)

    monkeypatch.setattr(service, "get_creator_rewards", tracked)
    service.talent.fail_scores = True
    assert client.get(f"/api/v1/leaderboard/{CREATOR_B}").status_code == 502

    service.talent.fail_scores = False
    assert client.get(f"/api/v1/leaderboard/{CREATOR_B}").status_code == 200
    assert calls == [CREATOR_B, CREATOR_B]


def test_creator_rewards_malformed_uuid(client) -> None:
    assert client.get("/api/v1/leaderboard/not-a-uuid").status_code == 422


def test_boosted_profiles(client, fake_talent) -> None:
    fake_talent.boosted = BoostedProfiles(ids=frozenset({CREATOR_C, CREATOR_A}), complete=True)
    body = client.get("/api/v1/boosted-profiles").json()
    assert body == {"profiles": sorted([CREATOR_A, CREATOR_C])}


def test_sponsors(client) -> None:
    body = client.get("/api/v1/sponsors").json()
    assert body["total_pool"] == 18288
    assert sum(s["amount"] for s in body["sponsors"]) == 18288


def test_undecided_creator(client) -> None:
    res = client.get("/api/v1/user-preferences/decision", params={"talent_uuid": CREATOR_A})
    assert res.status_code == 200
    assert res.json()["rewards_decision"] is None


def test_opt_out_requires_confirmation(client) -> None:
    res = client.post(
        "/api/v1/user-preferences/optout",
        json={"talent_uuid": CREATOR_A, "confirm_optout": False},
    )
    assert res.status_code == 400


def test_opt_out_redistributes_on_leaderboard(client) -> None:
    client.get("/api/v1/leaderboard")
    res = client.post(
        "/api/v1/user-preferences/optout",
        json={"talent_uuid": CREATOR_A, "confirm_optout": True},
    )
    assert res.status_code == 200
    assert res.json()["rewards_decision"] == "opted_out"

    a, b, c = client.get("/api/v1/leaderboard").json()["entries"]
    assert a["is_opted_out"] is True
    assert a["reward_display"] == "$480"
    assert a["payable_reward"] == 0
    assert b["final_reward"] == 400
    assert c["reward_display"] == "$400"


def test_decision_is_final(client) -> None:
    url = "/api/v1/user-preferences/decision"
    assert client.post(url, json={"talent_uuid": CREATOR_A, "rewards_decision": "opted_in"}).status_code == 200
    assert client.post(url, json={"talent_uuid": CREATOR_A, "rewards_decision": "opted_in"}).status_code == 200
    res = client.post(url, json={"talent_uuid": CREATOR_A, "rewards_decision": "opted_out"})
    assert res.status_code == 409
    assert client.get(url, params={"talent_uuid": CREATOR_A}).json()["rewards_decision"] == "opted_in"


@pytest.mark.parametrize(
    "payload",
    [
        {"talent_uuid": "not-a-uuid", "rewards_decision": "opted_in"},
        {"talent_uuid": CREATOR_A, "rewards_decision": "maybe"},
    ],
)
def test_decision_validation(client, payload) -> None:
    assert client.post("/api/v1/user-preferences/decision", json=payload).status_code == 422


def test_decision_write_failure_is_500(client, fake_db) -> None:
    fake_db.fail_writes = True
    res = client.post(
        "/api/v1/user-preferences/decision",
        json={"talent_uuid": CREATOR_A, "rewards_decision": "opted_out"},
    )
    assert res.status_code == 500


def test_opted_out_percentage(client) -> None:
    url = "/api/v1/user-preferences/decision"
    client.post(url, json={"talent_uuid": CREATOR_A, "rewards_decision": "opted_out"})
    client.post(url, json={"talent_uuid": CREATOR_B, "rewards_decision": "opted_in"})
    body = client.get("/api/v1/user-preferences/opted-out-percentage").json()
    assert body == {"percentage": 50}


@pytest.mark.parametrize("headers", [{}, {"x-api-key": "wrong"}])
def test_snapshot_requires_admin_key(client, headers) -> None:
    assert client.post("/api/v1/leaderboard-snapshot", headers=headers).status_code == 401


def test_admin_routes_closed_when_key_unset(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "snapshot_admin_api_key", "")
    res = client.post("/api/v1/leaderboard-snapshot", headers={"x-api-key": ""})
    assert res.status_code == 401


def test_snapshot_lifecycle(client) -> None:
    assert client.get("/api/v1/leaderboard-snapshot").status_code == 404

    res = client.post("/api/v1/leaderboard-snapshot", headers={"x-api-key": ADMIN_KEY})
    assert res.status_code == 201
    assert res.json()["entries_count"] == 3

    again = client.post("/api/v1/leaderboard-snapshot", headers={"x-api-key": ADMIN_KEY})
    assert again.status_code == 409

    body = client.get("/api/v1/leaderboard-snapshot").json()
    assert body["total_count"] == 3
    assert [r["rank"] for r in body["snapshots"]] == [1, 2, 2]
    assert body["created_at"] is not None

    row = client.get(f"/api/v1/leaderboard-snapshot/{CREATOR_A}").json()
    assert row["rewards_amount"] == 480
    assert client.get(f"/api/v1/leaderboard-snapshot/{UNKNOWN_UUID}").status_code == 404


def test_snapshot_refuses_incomplete_leaderboard(client, fake_talent) -> None:
    fake_talent.entries = fake_talent.entries[:2]
    res = client.post("/api/v1/leaderboard-snapshot", headers={"x-api-key": ADMIN_KEY})
    assert res.status_code == 503
    assert client.get("/api/v1/leaderboard-snapshot").status_code == 404


def test_admin_cache_invalidation(client, fake_talent) -> None:
    client.get("/api/v1/leaderboard")
    res = client.post("/api/v1/admin/invalidate-leaderboard-cache", headers={"x-api-key": ADMIN_KEY})
    assert res.json() == {"ok": True, "invalidated": 3}
    client.get("/api/v1/leaderboard")
    assert fake_talent.score_calls == 2
