"""
Unit tests for wire messages
"""

import pytest

from remote_bridge.core.messages import (
    AuthenticateRequest,
    AuthenticationResult,
    ErrorNotice,
    InitialState,
    RemoteMessage,
    WireEvent,
)
from remote_bridge.exceptions import InvalidMessageError


class TestMessages:
    """Test cases for the tagged message union"""

    def test_event_names(self):
        """Test that each variant maps to its Socket.IO event"""
        assert AuthenticateRequest("1").event is WireEvent.AUTHENTICATE
        assert AuthenticationResult.accepted().event.value == "authenticated"
        assert InitialState({}).event.value == "initialState"
        assert ErrorNotice("x").event.value == "error"
        assert RemoteMessage("ping").event.value == "message"

    def test_authenticate_request_parsing(self):
        assert AuthenticateRequest.from_payload({"pin": "1234"}).pin == "1234"
        assert AuthenticateRequest.from_payload({}).pin is None
        assert AuthenticateRequest.from_payload("1234").pin == "1234"

    def test_authentication_result_payloads(self):
        """Test success and failure acknowledgments"""
        assert AuthenticationResult.accepted().to_payload() == {"success": True}
        assert AuthenticationResult.rejected().to_payload() == {
            "success": False,
            "error": "Invalid PIN",
        }

    def test_initial_state_is_verbatim(self):
        snapshot = {"queue": [], "settings": {"soundEnabled": True}}
        assert InitialState(snapshot).to_payload() is snapshot

    def test_remote_message_passthrough(self):
        """Test that unknown fields survive parsing untouched"""
        payload = {"type": "submit", "value": "yes", "nested": {"a": [1, 2]}}
        message = RemoteMessage.from_payload(payload)

        assert message.type == "submit"
        assert message.get("value") == "yes"
        assert message.get("missing", "default") == "default"
        assert message.to_payload() == payload

    @pytest.mark.parametrize("payload", [
        None,
        "submit",
        ["submit"],
        {},
        {"type": ""},
        {"type": 42},
        {"value": "no type"},
    ])
    def test_invalid_payloads_rejected(self, payload):
        """Test that payloads without a string type tag are rejected"""
        with pytest.raises(InvalidMessageError):
            RemoteMessage.from_payload(payload)

    def test_coerce(self):
        message = RemoteMessage("updateQueue", {"queue": []})
        assert RemoteMessage.coerce(message) is message
        assert RemoteMessage.coerce({"type": "updateQueue", "queue": []}) == message


if __name__ == "__main__":
    pytest.main([__file__])
