"""
Tests for the state store, run against a throwaway SQLite file.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(__file__))

import db
from plan import PlanState, default_plan


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.delenv('DB_HOST', raising=False)
    path = str(tmp_path / 'state' / 'dashboard.db')
    assert db.init_db(path)
    return path


class TestInit:

    def test_creates_file_and_default_row(self, store):
        assert os.path.exists(store)
        assert db.backend() == 'sqlite'
        assert db.is_available()
        assert db.state_exists()

    def test_default_state(self, store):
        state = db.load_state()
        assert state['overhead'] == {'salary': 47000, 'tech': 4855, 'admin': 12800}
        assert state['rpmSeasonality']['Dec'] == 1.35
        assert state['syndConfigs'] is None
        assert state['updatedBy'] == 'system'

    def test_reinit_keeps_existing_state(self, store):
        db.save_state({'overhead': {'salary': 1, 'tech': 2, 'admin': 3}})
        assert db.init_db(store)
        assert db.load_state()['overhead'] == {'salary': 1, 'tech': 2, 'admin': 3}

    def test_uninitialised_store_raises(self, monkeypatch):
        monkeypatch.setattr(db, '_backend', '')
        with pytest.raises(RuntimeError):
            db.load_state()


class TestSaveLoad:

    def test_round_trip_full_plan(self, store):
        blob = default_plan().to_dict()
        ts = db.save_state(blob)
        state = db.load_state()
        assert state['lastUpdated'] == ts
        assert state['updatedBy'] == blob['updatedBy']
        assert state['discConfigs'] == blob['discConfigs']
        assert PlanState.from_dict(state).brands == PlanState.from_dict(blob).brands

    def test_missing_updated_by_defaults_to_user(self, store):
        db.save_state({'overhead': {'salary': 1, 'tech': 0, 'admin': 0}})
        assert db.load_state()['updatedBy'] == 'user'

    def test_updated_by_kept(self, store):
        db.save_state({'updatedBy': 'alice'})
        assert db.load_state()['updatedBy'] == 'alice'

    def test_reset(self, store):
        db.save_state(default_plan().to_dict())
        state = db.reset_state()
        assert state['updatedBy'] == 'system-reset'
        loaded = db.load_state()
        assert loaded['syndConfigs'] is None
        assert loaded['updatedBy'] == 'system-reset'
        assert loaded['lastUpdated'] == state['lastUpdated']
