"""Tests for local persistence and legacy migration."""

import json

import pytest

from leaguetracker.models import LeagueState


def _store_league(local_store, league, payload):
    local_store.set_item(f"test:league:{league}", payload if isinstance(payload, str) else json.dumps(payload))


class TestLoadLeague:
    """Tests for loading a league's state."""

    def test_missing_returns_default(self, repository):
        state = repository.load_league('B')
        assert state.pair_count == 4
        assert state.completed_map == {}

    def test_round_trip(self, repository):
        repository.save_league('B', LeagueState(pair_count=6, completed_map={"1-2": True, "3-4": False}))

        state = repository.load_league('B')
        assert state.pair_count == 6
        assert state.completed_map == {"1-2": True, "3-4": False}

    def test_persisted_shape_is_camel_case(self, repository, local_store):
        repository.save_league('B', LeagueState(pair_count=5, completed_map={"1-2": True}))

        stored = json.loads(local_store.get_item('test:league:B'))
        assert stored == {"pairCount": 5, "completedMap": {"1-2": True}}

    @pytest.mark.parametrize("payload", [
        "{not json",
        "[1, 2, 3]",
        "null",
        json.dumps({"pairCount": "4"}),
        json.dumps({"pairCount": True}),
        json.dumps({"completedMap": {"1-2": True}}),
    ])
    def test_malformed_returns_default(self, repository, local_store, payload):
        _store_league(local_store, 'B', payload)

        state = repository.load_league('B')
        assert state.pair_count == 4
        assert state.completed_map == {}

    def test_bad_completed_map_keeps_pair_count(self, repository, local_store):
        _store_league(local_store, 'B', {"pairCount": 7, "completedMap": ["1-2"]})

        state = repository.load_league('B')
        assert state.pair_count == 7
        assert state.completed_map == {}

    def test_non_boolean_flags_dropped(self, repository, local_store):
        _store_league(local_store, 'B', {"pairCount": 4, "completedMap": {"1-2": True, "1-3": 1, "1-4": "yes"}})

        assert repository.load_league('B').completed_map == {"1-2": True}

    def test_integral_float_accepted(self, repository, local_store):
        _store_league(local_store, 'B', {"pairCount": 6.0, "completedMap": {}})
        assert repository.load_league('B').pair_count == 6

    @pytest.mark.parametrize("stored, expected", [(1, 2), (0, 2), (500, 100)])
    def test_pair_count_clamped(self, repository, local_store, stored, expected):
        _store_league(local_store, 'B', {"pairCount": stored, "completedMap": {}})
        assert repository.load_league('B').pair_count == expected


class TestLegacyMigration:
    """Tests for migrating the single-league legacy shape."""

    def test_legacy_migrated_into_designated_league(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 5, "completedIds": ["1-2", "3-5"]}))

        state = repository.load_league('A')
        assert state.pair_count == 5
        assert state.completed_map == {"1-2": True, "3-5": True}

    def test_migrated_state_written_back(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 5, "completedIds": ["1-2"]}))

        repository.load_league('A')
        stored = json.loads(local_store.get_item('test:league:A'))
        assert stored == {"pairCount": 5, "completedMap": {"1-2": True}}

    def test_other_leagues_ignore_legacy(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 5, "completedIds": ["1-2"]}))

        state = repository.load_league('B')
        assert state.pair_count == 4
        assert state.completed_map == {}

    def test_new_shape_wins_over_legacy(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 5, "completedIds": ["1-2"]}))
        _store_league(local_store, 'A', {"pairCount": 3, "completedMap": {}})

        state = repository.load_league('A')
        assert state.pair_count == 3
        assert state.completed_map == {}

    def test_legacy_ids_filtered(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 4, "completedIds": ["1-2", 7, None]}))
        assert repository.load_league('A').completed_map == {"1-2": True}

    def test_legacy_without_id_list(self, repository, local_store):
        local_store.set_item('test-legacy', json.dumps({"pairCount": 4, "completedIds": "1-2"}))
        assert repository.load_league('A').completed_map == {}

    def test_corrupt_legacy_returns_default(self, repository, local_store):
        local_store.set_item('test-legacy', "garbage")

        state = repository.load_league('A')
        assert state.pair_count == 4
        assert local_store.get_item('test:league:A') is None


class TestActiveLeague:
    """Tests for the active league key."""

    def test_defaults_to_first_league(self, repository):
        assert repository.load_active_league(['A', 'B']) == 'A'

    def test_round_trip(self, repository):
        repository.save_active_league('B')
        assert repository.load_active_league(['A', 'B']) == 'B'

    def test_unknown_label_falls_back(self, repository, local_store):
        local_store.set_item('test:active', 'Z')
        assert repository.load_active_league(['A', 'B']) == 'A'
