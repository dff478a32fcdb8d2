"""
In-process state owner for Remote Bridge

Holds a prompt queue, tool-call history, an optional pending request and user
settings, and implements the StateOwner interface so the bridge can be run
standalone. Real hosts provide their own StateOwner.
"""

import asyncio
import inspect
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.messages import RemoteMessage
from ..core.state_owner import Responder, Snapshot
from ..utils.logging_setup import get_logger

logger = get_logger('local_state')

BroadcastCallback = Callable[[Dict[str, Any]], Any]


@dataclass
class PendingRequest:
    """A question from the tool waiting for the user's answer"""
    id: str
    prompt: str
    is_approval_question: bool = False
    choices: Optional[List[Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "prompt": self.prompt,
            "isApprovalQuestion": self.is_approval_question,
        }
        if self.choices is not None:
            data["choices"] = list(self.choices)
        return data


@dataclass
class Settings:
    sound_enabled: bool = True
    interactive_approval_enabled: bool = True
    reusable_prompts: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "soundEnabled": self.sound_enabled,
            "interactiveApprovalEnabled": self.interactive_approval_enabled,
            "reusablePrompts": list(self.reusable_prompts),
        }


class LocalStateOwner:
    """Authoritative state for a standalone bridge"""

    def __init__(self, max_history_length: int = 100):
        self.queue: List[Dict[str, Any]] = []
        self.queue_enabled = True
        self.current_session: List[Dict[str, Any]] = []
        self.persisted_history: List[Dict[str, Any]] = []
        self.pending_request: Optional[PendingRequest] = None
        self.settings = Settings()
        self.max_history_length = max_history_length
        self._broadcast: Optional[BroadcastCallback] = None
        self._answer_waiters: Dict[str, asyncio.Future] = {}

        self._handlers: Dict[str, Callable[[RemoteMessage], Awaitable[None]]] = {
            'addQueuePrompt': self._add_queue_prompt,
            'removeQueuePrompt': self._remove_queue_prompt,
            'toggleQueue': self._toggle_queue,
            'clearQueue': self._clear_queue,
            'submit': self._submit,
            'updateSettings': self._update_settings,
        }

    def set_broadcast_callback(self, callback: BroadcastCallback):
        """Where state changes are pushed, normally RemoteBridge.broadcast"""
        self._broadcast = callback

    # ── StateOwner interface ──

    def get_snapshot(self) -> Snapshot:
        return {
            "queue": [dict(item) for item in self.queue],
            "queueEnabled": self.queue_enabled,
            "currentSession": [dict(entry) for entry in self.current_session],
            "persistedHistory": [dict(entry) for entry in self.persisted_history],
            "pendingRequest": self.pending_request.to_dict() if self.pending_request else None,
            "settings": self.settings.to_dict(),
        }

    async def on_inbound_message(self, message: RemoteMessage, respond: Responder) -> None:
        handler = self._handlers.get(message.type)
        if handler is None:
            logger.debug(f"Ignoring unsupported message type {message.type}")
            return
        await handler(message)

    # ── Host-side operations ──

    async def request_input(self, prompt: str, is_approval_question: bool = False,
                            choices: Optional[List[Any]] = None) -> PendingRequest:
        """Raise a pending request and announce it to remote clients"""
        request = PendingRequest(
            id=f"req_{uuid.uuid4().hex[:12]}",
            prompt=prompt,
            is_approval_question=is_approval_question,
            choices=choices
        )
        self.pending_request = request
        self._answer_waiters[request.id] = asyncio.get_running_loop().create_future()
        await self._push({"type": "toolCallPending", **request.to_dict()})
        return request

    async def wait_for_answer(self, request_id: str, timeout: Optional[float] = None) -> str:
        """Block until a client submits an answer for the request"""
        waiter = self._answer_waiters.get(request_id)
        if waiter is None:
            raise KeyError(f"Unknown request {request_id}")
        try:
            return await asyncio.wait_for(waiter, timeout)
        finally:
            self._answer_waiters.pop(request_id, None)

    def save_current_session_to_history(self):
        """Move the current session's entries into persisted history"""
        if not self.current_session:
            return
        self.persisted_history.extend(self.current_session)
        self.persisted_history = self.persisted_history[-self.max_history_length:]
        self.current_session = []

    # ── Message handlers ──

    async def _add_queue_prompt(self, message: RemoteMessage):
        prompt = message.get('prompt')
        if not isinstance(prompt, str) or not prompt.strip():
            return
        self.queue.append({"id": message.get('id') or f"q_{uuid.uuid4().hex[:8]}", "prompt": prompt})
        await self._push_queue()

    async def _remove_queue_prompt(self, message: RemoteMessage):
        prompt_id = message.get('id')
        before = len(self.queue)
        self.queue = [item for item in self.queue if item["id"] != prompt_id]
        if len(self.queue) != before:
            await self._push_queue()

    async def _toggle_queue(self, message: RemoteMessage):
        enabled = message.get('enabled')
        self.queue_enabled = (not self.queue_enabled) if enabled is None else bool(enabled)
        await self._push_queue()

    async def _clear_queue(self, message: RemoteMessage):
        self.queue = []
        await self._push_queue()

    async def _submit(self, message: RemoteMessage):
        value = message.get('value')
        request = self.pending_request
        if request is None:
            logger.debug("Submit received with no pending request")
            return
        if message.get('id') not in (None, request.id):
            logger.debug(f"Submit for stale request {message.get('id')}")
            return

        self.pending_request = None
        self.current_session.append({
            "id": request.id,
            "prompt": request.prompt,
            "response": value,
            "timestamp": int(time.time() * 1000),
        })
        self.current_session = self.current_session[-self.max_history_length:]

        waiter = self._answer_waiters.get(request.id)
        if waiter is not None and not waiter.done():
            waiter.set_result(value)

        await self._push({"type": "updateCurrentSession", "history": self.current_session})

    async def _update_settings(self, message: RemoteMessage):
        if 'soundEnabled' in message.data:
            self.settings.sound_enabled = bool(message.get('soundEnabled'))
        if 'interactiveApprovalEnabled' in message.data:
            self.settings.interactive_approval_enabled = bool(message.get('interactiveApprovalEnabled'))
        if isinstance(message.get('reusablePrompts'), list):
            self.settings.reusable_prompts = list(message.get('reusablePrompts'))
        await self._push({"type": "updateSettings", **self.settings.to_dict()})

    async def _push_queue(self):
        await self._push({"type": "updateQueue", "queue": self.queue, "enabled": self.queue_enabled})

    async def _push(self, payload: Dict[str, Any]):
        if self._broadcast is None:
            return
        result = self._broadcast(payload)
        if inspect.isawaitable(result):
            await result
