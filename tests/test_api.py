"""
Tests for the HTTP API routes.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from services.dependencies import init_dependencies, reset_dependencies
from settings import LeagueSettings

from conftest import CATALOGUE


@pytest.fixture
def client(db_url, now):
    reset_dependencies()
    init_dependencies(LeagueSettings(database_url=db_url), now=now)
    yield TestClient(app)
    reset_dependencies()


@pytest.fixture
def ids(client):
    """Seed the catalogue through the API. Returns name -> player id."""
    created = {}
    for name, (position, price) in CATALOGUE.items():
        response = client.post("/api/players", json={"name": name, "position": position, "price": price})
        assert response.status_code == 201
        created[name] = response.json()["id"]
    return created


@pytest.fixture
def team(client, ids):
    response = client.post("/api/rosters", json={
        "user_id": 1,
        "name": "Test Eleven",
        "starters": [ids["Alisson"], ids["Rice"], ids["Caicedo"], ids["Martinelli"], ids["Bowen"]],
        "subs": [ids["Raya"], ids["Son"]],
        "captain_id": ids["Martinelli"],
        "vice_captain_id": ids["Bowen"],
    })
    assert response.status_code == 201
    return response.json()["team"]


@pytest.fixture
def open_round(client, now):
    response = client.post("/api/gameweek/advance", json={"deadline": "2026-08-02T12:00:00"})
    assert response.status_code == 200
    return response.json()["gameweek"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPlayers:

    def test_list_available(self, client, ids, team):
        response = client.get("/api/players", params={"position": "gk", "available": True})
        assert response.status_code == 200
        names = {p["name"] for p in response.json()["players"]}
        assert names == {"Ederson", "Pickford"}

    def test_invalid_position(self, client):
        response = client.post("/api/players", json={"name": "Kane", "position": "ST", "price": 14.0})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_player"

    def test_unknown_player(self, client):
        assert client.get("/api/players/999").status_code == 404


class TestRosters:

    def test_create_and_get(self, client, team):
        assert team["budget"] == 53.5
        assert team["team_value"] == 96.5

        response = client.get(f"/api/rosters/{team['id']}")
        assert response.status_code == 200
        assert response.json()["team"]["name"] == "Test Eleven"

    def test_duplicate_roster(self, client, ids, team):
        response = client.post("/api/rosters", json={
            "user_id": 1,
            "name": "Another",
            "starters": [ids["Ederson"], ids["Rodri"], ids["Kante"], ids["Vinicius"], ids["Saka"]],
            "subs": [ids["Pickford"], ids["Garnacho"]],
            "captain_id": ids["Vinicius"],
            "vice_captain_id": ids["Saka"],
        })
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "roster_already_exists"

    def test_missing_roster(self, client):
        assert client.get("/api/rosters/999").status_code == 404

    def test_request_validation(self, client):
        assert client.post("/api/rosters", json={"user_id": 1}).status_code == 422

    def test_swap(self, client, ids, team, open_round):
        response = client.post(f"/api/rosters/{team['id']}/swap", json={
            "player_out_id": ids["Bowen"], "player_in_id": ids["Saka"],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["team"]["budget"] == 45.5
        assert body["transfer_cost"] == 0

    def test_swap_wrong_position(self, client, ids, team, open_round):
        response = client.post(f"/api/rosters/{team['id']}/swap", json={
            "player_out_id": ids["Bowen"], "player_in_id": ids["Vinicius"],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["scope"] == "starters"

    def test_swap_locked(self, client, ids, team, open_round, now):
        now.advance(days=2)
        response = client.post(f"/api/rosters/{team['id']}/swap", json={
            "player_out_id": ids["Bowen"], "player_in_id": ids["Saka"],
        })
        assert response.status_code == 423

    def test_captaincy(self, client, ids, team):
        response = client.put(f"/api/rosters/{team['id']}/captaincy", json={
            "captain_id": ids["Rice"], "vice_captain_id": ids["Son"],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_captaincy"


class TestChips:

    def test_use_and_cancel(self, client, team, open_round):
        roster_id = team["id"]
        response = client.post(f"/api/chips/{roster_id}/use", json={"chip_type": "tripleCaptain"})
        assert response.status_code == 200
        assert response.json()["active_chip"] == "tripleCaptain"

        conflict = client.post(f"/api/chips/{roster_id}/use", json={"chip_type": "benchBoost"})
        assert conflict.status_code == 409

        history = client.get(f"/api/chips/{roster_id}/history").json()
        assert history["total_used"] == 1

        assert client.post(f"/api/chips/{roster_id}/cancel").status_code == 200
        status = client.get(f"/api/chips/{roster_id}").json()
        assert status["active_chip"] is None
        assert status["available_count"] == 4

    def test_cancel_without_chip(self, client, team):
        response = client.post(f"/api/chips/{team['id']}/cancel")
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "no_active_chip"

    def test_unknown_chip(self, client, team):
        response = client.post(f"/api/chips/{team['id']}/use", json={"chip_type": "doubleUp"})
        assert response.status_code == 400


class TestGameweekFlow:

    def test_lock_ingest_score_advance(self, client, ids, team, open_round):
        assert client.get("/api/gameweek").json()["current"]["number"] == 1

        assert client.post("/api/gameweek/score").json()["complete"] is False
        locked = client.post("/api/gameweek/lock")
        assert locked.json()["gameweek"]["status"] == "locked"

        stats = [{"playerId": pid, "played": True} for pid in
                 [ids["Alisson"], ids["Rice"], ids["Caicedo"], ids["Bowen"], ids["Raya"], ids["Son"]]]
        stats.append({"playerId": ids["Martinelli"], "goals": 1, "played": True})
        response = client.post("/api/gameweek/stats", json={"gameweek": 1, "players": stats})
        assert response.status_code == 200
        assert response.json()["players"] == 7

        single = client.post("/api/gameweek/score", json={"roster_id": team["id"]}).json()
        assert single["status"] == "scored"
        assert single["weekly_points"] == 6

        batch = client.post("/api/gameweek/score").json()
        assert batch["complete"] is True

        board = client.get("/api/leaderboard").json()
        assert board["teams"][0]["points"] == 6

        advanced = client.post("/api/gameweek/advance", json={"deadline": "2026-08-09T12:00:00"})
        assert advanced.json()["gameweek"]["number"] == 2

    def test_advance_unscored(self, client, open_round):
        response = client.post("/api/gameweek/advance", json={"deadline": "2026-08-09T12:00:00"})
        assert response.status_code == 409

    def test_no_gameweek(self, client):
        assert client.get("/api/gameweek").json() == {"current": None}
        assert client.post("/api/gameweek/lock").status_code == 409
