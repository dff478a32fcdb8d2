"""
Wire messages for Remote Bridge

Tagged union of everything the bridge sends or receives over Socket.IO.
The bridge interprets only the framing variants; application payloads travel
as RemoteMessage, an opaque passthrough of a `type` tag plus arbitrary data.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..exceptions import InvalidMessageError


class WireEvent(Enum):
    """Socket.IO event names"""
    AUTHENTICATE = "authenticate"
    AUTHENTICATED = "authenticated"
    INITIAL_STATE = "initialState"
    MESSAGE = "message"
    ERROR = "error"


INVALID_PIN = "Invalid PIN"
NOT_AUTHENTICATED = "Not authenticated"
INVALID_MESSAGE = "Invalid message"


@dataclass(frozen=True)
class AuthenticateRequest:
    """Client -> server PIN submission"""
    pin: Any

    event = WireEvent.AUTHENTICATE

    @classmethod
    def from_payload(cls, payload: Any) -> 'AuthenticateRequest':
        if isinstance(payload, dict):
            return cls(pin=payload.get('pin'))
        # Some clients send the bare PIN
        return cls(pin=payload)

    def to_payload(self) -> Dict[str, Any]:
        return {'pin': self.pin}


@dataclass(frozen=True)
class AuthenticationResult:
    """Server -> client authentication acknowledgment"""
    success: bool
    error: Optional[str] = None

    event = WireEvent.AUTHENTICATED

    @classmethod
    def accepted(cls) -> 'AuthenticationResult':
        return cls(success=True)

    @classmethod
    def rejected(cls, error: str = INVALID_PIN) -> 'AuthenticationResult':
        return cls(success=False, error=error)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'success': self.success}
        if self.error is not None:
            payload['error'] = self.error
        return payload


@dataclass(frozen=True)
class InitialState:
    """Server -> client snapshot delivered once per successful authentication"""
    snapshot: Dict[str, Any]

    event = WireEvent.INITIAL_STATE

    def to_payload(self) -> Dict[str, Any]:
        return self.snapshot


@dataclass(frozen=True)
class ErrorNotice:
    """Server -> client rejection of a client message"""
    message: str

    event = WireEvent.ERROR

    def to_payload(self) -> Dict[str, Any]:
        return {'message': self.message}


@dataclass(frozen=True)
class RemoteMessage:
    """Opaque application message: a `type` tag plus whatever data it carries"""
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    event = WireEvent.MESSAGE

    @classmethod
    def from_payload(cls, payload: Any) -> 'RemoteMessage':
        """Parse an inbound payload, checking only the `type` tag"""
        if not isinstance(payload, dict):
            raise InvalidMessageError(f"Expected an object, got {type(payload).__name__}")

        message_type = payload.get('type')
        if not isinstance(message_type, str) or not message_type:
            raise InvalidMessageError("Message is missing a string 'type' field")

        data = {key: value for key, value in payload.items() if key != 'type'}
        return cls(type=message_type, data=data)

    @classmethod
    def coerce(cls, message: Union['RemoteMessage', Dict[str, Any]]) -> 'RemoteMessage':
        if isinstance(message, RemoteMessage):
            return message
        return cls.from_payload(message)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_payload(self) -> Dict[str, Any]:
        payload = {'type': self.type}
        payload.update(self.data)
        return payload


OutboundMessage = Union[AuthenticationResult, InitialState, ErrorNotice, RemoteMessage]
