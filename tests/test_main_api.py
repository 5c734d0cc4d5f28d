"""Tests for FastAPI endpoints."""

import json

import pytest
from fastapi.testclient import TestClient

from leaguetracker.main import create_app
from leaguetracker.models import LeagueSettingsRow, MatchRow
from leaguetracker.services.fixtures import FixtureAlgorithm


@pytest.fixture
def client(make_tracker):
    """Test client around a local-only tracker."""
    with TestClient(create_app(tracker=make_tracker())) as test_client:
        yield test_client


@pytest.fixture
def remote_client(make_tracker, fake_remote):
    with TestClient(create_app(tracker=make_tracker(remote=fake_remote))) as test_client:
        yield test_client


class TestHomeEndpoint:
    """Tests for home endpoint."""

    def test_home_endpoint_returns_html(self, client):
        """GET / returns HTML."""
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers.get("content-type", "")
        assert "League Tracker" in response.text


class TestHealthEndpoint:

    def test_health_without_remote(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["active_league"] == "A"
        assert data["remote"] is None

    def test_health_reports_remote(self, remote_client, fake_remote):
        assert remote_client.get("/health").json()["remote"] is True

        fake_remote.fail = True
        assert remote_client.get("/health").json()["remote"] is False


class TestLeagueEndpoints:
    """Tests for reading league state."""

    def test_list_leagues(self, client):
        response = client.get("/api/leagues")

        assert response.status_code == 200
        assert response.json() == {"leagues": ["A", "B"], "active": "A"}

    def test_get_league(self, client):
        data = client.get("/api/league").json()

        assert data["league"] == "A"
        assert data["pair_count"] == 4
        assert data["total_matches"] == 6
        assert data["matches"][0] == {
            "number": 1, "key": "1-2", "pair_a": 1, "pair_b": 2,
            "round": None, "completed": False,
        }
        assert data["edit_locked"] is False

    def test_rounds_empty_for_combinatorial(self, client):
        assert client.get("/api/league/rounds").json() == []

    def test_rounds_for_circle_method(self, make_tracker, local_store):
        local_store.set_item('test:league:A', json.dumps({"pairCount": 3, "completedMap": {}}))
        tracker = make_tracker(algorithm=FixtureAlgorithm.CIRCLE_METHOD)

        with TestClient(create_app(tracker=tracker)) as client:
            rounds = client.get("/api/league/rounds").json()

        assert [r["round"] for r in rounds] == [1, 2, 3]
        assert all(len(r["matches"]) == 1 for r in rounds)
        assert sorted(r["bye"] for r in rounds) == [1, 2, 3]


class TestToggleEndpoint:

    def test_toggle(self, client):
        response = client.post("/api/league/matches/2-3/toggle")

        assert response.status_code == 200
        data = response.json()
        assert data["completed_count"] == 1
        assert data["progress"] == 17
        assert data["edit_locked"] is True
        assert [m["key"] for m in data["matches"] if m["completed"]] == ["2-3"]

    def test_toggle_twice(self, client):
        client.post("/api/league/matches/2-3/toggle")
        data = client.post("/api/league/matches/2-3/toggle").json()

        assert data["completed_count"] == 0
        assert data["edit_locked"] is False

    def test_unknown_match_404(self, client):
        response = client.post("/api/league/matches/4-9/toggle")
        assert response.status_code == 404


class TestPairCountEndpoints:

    def test_set_pair_count(self, client):
        data = client.put("/api/league/pair-count", json={"value": 6}).json()
        assert data["pair_count"] == 6
        assert data["total_matches"] == 15

    @pytest.mark.parametrize("value, expected", [(1, 2), (250, 100)])
    def test_set_pair_count_clamped(self, client, value, expected):
        response = client.put("/api/league/pair-count", json={"value": value})
        assert response.status_code == 200
        assert response.json()["pair_count"] == expected

    def test_step(self, client):
        assert client.post("/api/league/pair-count/step", json={"delta": 1}).json()["pair_count"] == 5
        assert client.post("/api/league/pair-count/step", json={"delta": -3}).json()["pair_count"] == 2

    def test_locked_409(self, client):
        client.post("/api/league/matches/1-2/toggle")

        assert client.put("/api/league/pair-count", json={"value": 6}).status_code == 409
        assert client.post("/api/league/pair-count/step", json={"delta": 1}).status_code == 409
        assert client.get("/api/league").json()["pair_count"] == 4

    def test_invalid_body_422(self, client):
        assert client.put("/api/league/pair-count", json={"value": "many"}).status_code == 422


class TestResetAndSwitch:

    def test_reset(self, client):
        client.post("/api/league/matches/1-2/toggle")
        client.post("/api/league/matches/3-4/toggle")

        data = client.post("/api/league/reset").json()
        assert data["completed_count"] == 0
        assert data["edit_locked"] is False

    def test_switch_league(self, client):
        client.post("/api/league/matches/1-2/toggle")

        response = client.put("/api/leagues/active", json={"league": "B"})
        assert response.status_code == 200
        assert response.json()["league"] == "B"
        assert response.json()["completed_count"] == 0
        assert client.get("/api/leagues").json()["active"] == "B"

        data = client.put("/api/leagues/active", json={"league": "A"}).json()
        assert data["completed_count"] == 1

    def test_unknown_league_404(self, client):
        response = client.put("/api/leagues/active", json={"league": "Z"})
        assert response.status_code == 404
        assert client.get("/api/leagues").json()["active"] == "A"


class TestReloadEndpoint:

    def test_reload_applies_remote(self, remote_client, fake_remote):
        fake_remote.settings['A'] = LeagueSettingsRow(league='A', pair_count=3)
        fake_remote.rows['A'] = [MatchRow(league='A', match_key='2-3', completed=True)]

        data = remote_client.post("/api/league/reload").json()
        assert data["pair_count"] == 3
        assert data["completed_count"] == 1

    def test_reload_without_remote(self, client):
        assert client.post("/api/league/reload").status_code == 200
