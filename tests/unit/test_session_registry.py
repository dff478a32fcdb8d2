"""
Unit tests for SessionRecord and SessionRegistry
"""

import random
import re
from datetime import datetime

import pytest

from remote_bridge.core.session import SessionRecord, generate_session_id, DEFAULT_LABEL
from remote_bridge.core.session_registry import SessionRegistry


def make_record(session_id: str, port: int, label: str = "workspace") -> SessionRecord:
    return SessionRecord(id=session_id, port=port, secret="1234", label=label)


class TestSessionRecord:
    """Test cases for the SessionRecord data model"""

    def test_record_creation(self):
        """Test record creation with required fields"""
        record = make_record("session_1", 3000)

        assert record.id == "session_1"
        assert record.port == 3000
        assert record.secret == "1234"
        assert record.label == "workspace"
        assert isinstance(record.started_at, datetime)

    def test_empty_id_rejected(self):
        """Test that empty session ID raises ValueError"""
        with pytest.raises(ValueError, match="Session ID cannot be empty"):
            SessionRecord(id="", port=3000, secret="1234")

    def test_invalid_port_rejected(self):
        with pytest.raises(ValueError):
            SessionRecord(id="s", port=0, secret="1234")
        with pytest.raises(ValueError):
            SessionRecord(id="s", port=70000, secret="1234")

    def test_default_label(self):
        """Test that a missing label falls back to the default workspace name"""
        assert SessionRecord(id="s", port=3000, secret="1").label == DEFAULT_LABEL
        assert SessionRecord(id="s", port=3000, secret="1", label="").label == DEFAULT_LABEL

    def test_to_dict_hides_secret_by_default(self):
        """Test the public listing form"""
        record = make_record("session_1", 3000)
        result = record.to_dict()

        assert result["id"] == "session_1"
        assert result["label"] == "workspace"
        assert result["workspaceName"] == "workspace"
        assert result["port"] == 3000
        assert result["startTime"] == record.start_time_ms
        assert isinstance(result["startedAt"], str)
        assert "pin" not in result
        assert "1234" not in result.values()

    def test_to_dict_with_secret(self):
        result = make_record("session_1", 3000).to_dict(include_secret=True)
        assert result["pin"] == "1234"

    def test_generate_session_id_format(self):
        """Test session id token shape and uniqueness"""
        session_id = generate_session_id()
        assert re.fullmatch(r"session_\d+_[a-z0-9]{7}", session_id)

        ids = {generate_session_id() for _ in range(200)}
        assert len(ids) == 200


class TestSessionRegistry:
    """Test cases for the process-wide session registry"""

    def setup_method(self):
        """Set up test fixtures"""
        self.registry = SessionRegistry()

    def test_register_and_list(self):
        """Test that registered records are listed in order"""
        a = make_record("a", 3000)
        b = make_record("b", 3001)

        self.registry.register(a)
        self.registry.register(b)

        assert self.registry.list() == [a, b]
        assert len(self.registry) == 2
        assert "a" in self.registry
        assert self.registry.get("b") is b
        assert self.registry.get_by_port(3001) is b

    def test_register_replaces_same_port(self):
        """Test that a restart on the same port replaces the stale record"""
        stale = make_record("old", 3000)
        fresh = make_record("new", 3000)

        self.registry.register(stale)
        self.registry.register(fresh)

        assert self.registry.list() == [fresh]
        assert self.registry.get("old") is None

    def test_unregister_by_id(self):
        """Test removal by id only touches that record"""
        self.registry.register(make_record("a", 3000))
        self.registry.register(make_record("b", 3001))

        assert self.registry.unregister("a") is True
        assert [r.id for r in self.registry.list()] == ["b"]

    def test_unregister_unknown_id(self):
        """Test that unregistering twice is harmless"""
        self.registry.register(make_record("a", 3000))

        assert self.registry.unregister("a") is True
        assert self.registry.unregister("a") is False
        assert self.registry.list() == []

    def test_list_returns_copy(self):
        self.registry.register(make_record("a", 3000))
        listing = self.registry.list()
        listing.clear()
        assert len(self.registry) == 1

    def test_ports_stay_unique_under_random_operations(self):
        """Test that no sequence of register/unregister yields duplicate ports"""
        rng = random.Random(42)
        known_ids = []

        for step in range(500):
            if known_ids and rng.random() < 0.3:
                self.registry.unregister(rng.choice(known_ids))
            else:
                session_id = f"s{step}"
                known_ids.append(session_id)
                self.registry.register(make_record(session_id, rng.randint(3000, 3010)))

            ports = [r.port for r in self.registry.list()]
            assert len(ports) == len(set(ports))

    def test_clear(self):
        self.registry.register(make_record("a", 3000))
        self.registry.clear()
        assert len(self.registry) == 0


if __name__ == "__main__":
    pytest.main([__file__])
