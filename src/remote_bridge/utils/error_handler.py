"""
Error Handling System for Remote Bridge

Classifies errors raised while serving remote clients, logs them by severity,
keeps statistics, and produces the user-visible message for failures that
must be shown to the person running the host.
"""

import asyncio
import re
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..exceptions import (
    AuthenticationError,
    BridgeStartupError,
    InvalidMessageError,
    NoPortAvailableError,
    NotAuthenticatedError,
    PortBindError,
)
from .logging_setup import get_logger

logger = get_logger('error_handler')


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"           # Expected client mistakes, logged only
    MEDIUM = "medium"     # A single connection or message was affected
    HIGH = "high"         # The bridge cannot serve, the user must act
    CRITICAL = "critical" # Process-level failure


class ErrorCategory(Enum):
    """Categories of errors"""
    PORT = "port"                      # Port exhaustion or bind failure
    AUTHENTICATION = "authentication"  # PIN mismatch or unauthenticated access
    TRANSPORT = "transport"            # Socket.IO / HTTP delivery problems
    RELAY = "relay"                    # State owner callback failures
    CONFIGURATION = "config"           # Configuration problems
    INTERNAL = "internal"              # Internal application errors


USER_MESSAGES = {
    ErrorCategory.PORT: "Remote server could not start: no free port to listen on ({detail})",
    ErrorCategory.AUTHENTICATION: "Invalid PIN. Check the PIN shown on the host and try again.",
    ErrorCategory.CONFIGURATION: "Remote server configuration is invalid ({detail})",
}


@dataclass
class ErrorInfo:
    """Information about an error"""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    context: Dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    session_id: Optional[str] = None
    connection_id: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for logging"""
        return {
            'error_type': type(self.error).__name__,
            'category': self.category.value,
            'severity': self.severity.value,
            'message': self.message,
            'context': self.context,
            'timestamp': self.timestamp,
            'session_id': self.session_id,
            'connection_id': self.connection_id,
            'traceback': ''.join(traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            )) if self.error.__traceback__ else None
        }


class ErrorDetector:
    """Detects and classifies various types of errors"""

    PATTERNS = {
        ErrorCategory.PORT: [
            r'address already in use',
            r'could not find available port',
            r'failed to bind',
        ],

        ErrorCategory.TRANSPORT: [
            r'connection.*(reset|closed|refused)',
            r'broken pipe',
            r'not a connected namespace',
            r'websocket',
        ],

        ErrorCategory.CONFIGURATION: [
            r'configuration validation failed',
            r'config.*not found',
        ],
    }

    @classmethod
    def classify_error(cls, error: Exception, context: Dict = None) -> ErrorInfo:
        """Classify an error and determine its properties"""
        error_message = str(error).lower()

        category = ErrorCategory.INTERNAL
        severity = ErrorSeverity.MEDIUM
        matched_type = True

        # Classify by exception type
        if isinstance(error, (NoPortAvailableError, PortBindError, BridgeStartupError)):
            category = ErrorCategory.PORT
        elif isinstance(error, (AuthenticationError, NotAuthenticatedError)):
            category = ErrorCategory.AUTHENTICATION
        elif isinstance(error, InvalidMessageError):
            category = ErrorCategory.RELAY
        elif isinstance(error, (ConnectionError, TimeoutError)):
            category = ErrorCategory.TRANSPORT
        elif isinstance(error, (ValueError, FileNotFoundError)) and 'config' in error_message:
            category = ErrorCategory.CONFIGURATION
        else:
            matched_type = False

        # Refine classification using patterns for untyped errors
        if not matched_type:
            for cat, patterns in cls.PATTERNS.items():
                if any(re.search(p, error_message, re.IGNORECASE) for p in patterns):
                    category = cat
                    break

        if context and context.get('stage') == 'relay' and category == ErrorCategory.INTERNAL:
            category = ErrorCategory.RELAY

        if category in (ErrorCategory.PORT, ErrorCategory.CONFIGURATION):
            severity = ErrorSeverity.HIGH
        elif category == ErrorCategory.AUTHENTICATION:
            severity = ErrorSeverity.LOW
        elif isinstance(error, MemoryError):
            severity = ErrorSeverity.CRITICAL

        return ErrorInfo(
            error=error,
            category=category,
            severity=severity,
            message=str(error),
            context=context or {}
        )


class ErrorHandler:
    """Main error handling coordinator"""

    def __init__(self, history_size: int = 1000):
        self.detector = ErrorDetector()
        self.error_history: List[ErrorInfo] = []
        self.history_size = history_size
        self.notify_callbacks: List[Callable[[ErrorInfo], None]] = []
        self._lock = asyncio.Lock()
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict:
        return {
            'total_errors': 0,
            'errors_by_category': {cat.value: 0 for cat in ErrorCategory},
            'errors_by_severity': {sev.value: 0 for sev in ErrorSeverity},
        }

    async def handle_error(self, error: Exception, context: Dict = None,
                           session_id: str = None,
                           connection_id: str = None) -> ErrorInfo:
        """Classify, record and log an error"""
        async with self._lock:
            return self.record_error(error, context, session_id, connection_id)

    def record_error(self, error: Exception, context: Optional[Dict] = None,
                     session_id: Optional[str] = None,
                     connection_id: Optional[str] = None) -> ErrorInfo:
        """Synchronous variant of handle_error for callers outside a coroutine"""
        error_info = self.detector.classify_error(error, context)
        error_info.session_id = session_id
        error_info.connection_id = connection_id

        self._update_stats(error_info)

        self.error_history.append(error_info)
        if len(self.error_history) > self.history_size:
            self.error_history = self.error_history[-self.history_size:]

        log_data = {'error_info': error_info.to_dict()}
        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(f"Critical error: {error_info.message}", extra=log_data)
        elif error_info.severity == ErrorSeverity.HIGH:
            logger.error(f"High severity error: {error_info.message}", extra=log_data)
        elif error_info.severity == ErrorSeverity.MEDIUM:
            logger.warning(f"Medium severity error: {error_info.message}", extra=log_data)
        else:
            logger.info(f"Low severity error: {error_info.message}", extra=log_data)

        if error_info.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
            self._notify(error_info)

        return error_info

    async def handle_startup_error(self, error: Exception, session_id: str = None) -> str:
        """Record a startup failure and return the message to show the user"""
        error_info = await self.handle_error(error, {'stage': 'startup'}, session_id=session_id)
        return self.user_message(error_info)

    def _notify(self, error_info: ErrorInfo):
        for callback in self.notify_callbacks:
            try:
                callback(error_info)
            except Exception as e:
                logger.error(f"Error notification callback failed: {e}")

    @staticmethod
    def user_message(error_info: ErrorInfo) -> str:
        """User-facing text; port and PIN failures are worded distinctly"""
        return ErrorHandler.message_for(error_info.category, error_info.message)

    @staticmethod
    def message_for(category: ErrorCategory, detail: str = "") -> str:
        template = USER_MESSAGES.get(category)
        if template is None:
            return f"Remote server error: {detail}"
        return template.format(detail=detail)

    def _update_stats(self, error_info: ErrorInfo):
        self.stats['total_errors'] += 1
        self.stats['errors_by_category'][error_info.category.value] += 1
        self.stats['errors_by_severity'][error_info.severity.value] += 1

    def add_notify_callback(self, callback: Callable[[ErrorInfo], None]):
        """Register a callback for errors the user must see"""
        self.notify_callbacks.append(callback)

    def get_recent_errors(self, count: int = 10) -> List[ErrorInfo]:
        """Get recent errors"""
        return self.error_history[-count:] if self.error_history else []

    def get_error_stats(self) -> Dict:
        """Get error statistics"""
        return {
            'total_errors': self.stats['total_errors'],
            'errors_by_category': dict(self.stats['errors_by_category']),
            'errors_by_severity': dict(self.stats['errors_by_severity']),
        }

    def get_session_errors(self, session_id: str) -> List[ErrorInfo]:
        """Get errors for a specific session"""
        return [error for error in self.error_history if error.session_id == session_id]

    def clear_error_history(self):
        """Clear error history"""
        self.error_history.clear()
        self.stats = self._empty_stats()
