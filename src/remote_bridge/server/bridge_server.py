"""
Remote Bridge Server

One bridge instance exposes one host session to remote devices on the LAN:
Socket.IO for the authenticated relay, plus a small HTTP surface for
session discovery and PIN-gated entry.
"""

from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import socketio
from aiohttp import web

from ..auth.pin_authenticator import PinAuthenticator
from ..core.messages import RemoteMessage
from ..core.session import SessionRecord, generate_session_id
from ..core.session_registry import SessionRegistry
from ..core.state_owner import StateOwner
from ..exceptions import AuthenticationError, PortBindError
from ..utils.config import RemoteConfig
from ..utils.error_handler import ErrorCategory, ErrorHandler
from ..utils.logging_setup import get_logger
from .connection_manager import ConnectionManager
from .network_info import ConnectionInfo, build_connection_info
from .pages import app_page, landing_page
from .port_allocator import find_available_port
from .relay import RelayProtocol

logger = get_logger('bridge_server')

SHUTDOWN_TIMEOUT = 1.0


class RemoteBridge:
    """Serves one host session's live state to remote clients"""

    def __init__(self, state_owner: StateOwner, registry: SessionRegistry,
                 config: Optional[RemoteConfig] = None,
                 label: Optional[str] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.state_owner = state_owner
        self.registry = registry
        self.config = config or RemoteConfig()
        self.label = label or self.config.label
        self.error_handler = error_handler or ErrorHandler()
        self.authenticator = PinAuthenticator(self.config.pin_length)

        self.session_id: Optional[str] = None
        self.record: Optional[SessionRecord] = None
        self.connections: Optional[ConnectionManager] = None
        self.relay: Optional[RelayProtocol] = None

        self._port = 0
        self._running = False
        self._sio: Optional[socketio.AsyncServer] = None
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

    @property
    def port(self) -> int:
        return self._port

    @property
    def pin(self) -> Optional[str]:
        return self.authenticator.pin

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self, preferred_port: Optional[int] = None) -> int:
        """Bind, register and serve; returns the effective port"""
        if self._running:
            logger.info(f"Restarting bridge {self.session_id}")
            await self.stop()

        # Fresh identity on every start; earlier clients must re-authenticate
        self.authenticator.regenerate()
        self.session_id = generate_session_id()

        start_port = preferred_port or self.config.port
        port = find_available_port(start_port, self.config.host, self.config.max_port_attempts)

        self._build_app()
        self._runner = web.AppRunner(self._app, shutdown_timeout=SHUTDOWN_TIMEOUT)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.config.host, port)
        try:
            await site.start()
        except OSError as e:
            await self._runner.cleanup()
            self._runner = None
            self._sio = None
            self._app = None
            raise PortBindError(port, self.config.host, e) from e

        self._port = port
        self._running = True

        self.record = SessionRecord(
            id=self.session_id,
            port=port,
            secret=self.authenticator.pin,
            label=self.label
        )
        self.registry.register(self.record)

        logger.info(f"Remote bridge {self.session_id} listening on {self.config.host}:{port}")
        return port

    def _build_app(self):
        self._sio = socketio.AsyncServer(
            async_mode='aiohttp',
            cors_allowed_origins=self.config.cors_allowed_origins,
            # Handle each client's events inline so they run in receipt order
            async_handlers=False,
            logger=False,
            engineio_logger=False,
        )
        self._app = web.Application()
        self._sio.attach(self._app)

        self.connections = ConnectionManager(self.authenticator, self._sio.emit, self.error_handler)
        self.relay = RelayProtocol(
            self.connections, self.state_owner, self.error_handler, self.session_id
        )

        self._sio.on('connect', handler=self._on_connect)
        self._sio.on('authenticate', handler=self._on_authenticate)
        self._sio.on('message', handler=self._on_message)
        self._sio.on('disconnect', handler=self._on_disconnect)

        r = self._app.router
        r.add_get('/', self._handle_landing)
        r.add_get('/app', self._handle_app)
        r.add_get('/api/sessions', self._handle_list_sessions)
        r.add_get('/health', self._handle_health)

    # ── Socket.IO events ──

    async def _on_connect(self, sid: str, environ: Dict[str, Any], auth: Any = None):
        self.connections.on_connect(sid)

    async def _on_authenticate(self, sid: str, data: Any = None):
        await self.relay.handle_authenticate(sid, data)

    async def _on_message(self, sid: str, data: Any = None):
        await self.relay.handle_inbound(sid, data)

    async def _on_disconnect(self, sid: str, *args):
        self.connections.on_disconnect(sid)

    # ── HTTP surface ──

    async def _handle_landing(self, request: web.Request) -> web.Response:
        pin = request.query.get('pin')
        if pin and self.authenticator.validate(pin):
            raise web.HTTPFound(f"/app?pin={quote(pin)}")

        notice = None
        if request.query.get('error') == 'invalid_pin':
            notice = ErrorHandler.message_for(ErrorCategory.AUTHENTICATION)

        html = landing_page(self.registry.list(), self.session_id, notice)
        return web.Response(text=html, content_type='text/html')

    async def _handle_app(self, request: web.Request) -> web.Response:
        if not self.authenticator.validate(request.query.get('pin', '')):
            self.error_handler.record_error(
                AuthenticationError(f"Invalid PIN on /app from {request.remote}"),
                {'stage': 'http'}, session_id=self.session_id
            )
            raise web.HTTPFound('/?error=invalid_pin')

        return web.Response(text=app_page(self.record.label), content_type='text/html')

    async def _handle_list_sessions(self, request: web.Request) -> web.Response:
        include_secret = self.config.expose_pins_in_listing
        sessions = [r.to_dict(include_secret=include_secret) for r in self.registry.list()]
        return web.json_response(sessions)

    async def _handle_health(self, request: web.Request) -> web.Response:
        stats = self.connections.stats() if self.connections else {}
        return web.json_response({
            'running': self._running,
            'port': self._port,
            'sessionId': self.session_id,
            'connections': stats.get('total_connections', 0),
            'authenticated': stats.get('authenticated_connections', 0),
        })

    # ── Host API ──

    async def broadcast(self, message: Union[RemoteMessage, Dict[str, Any]]) -> int:
        """Fire-and-forget delivery to every authenticated client"""
        if not self._running or self.relay is None:
            return 0
        return await self.relay.broadcast(message)

    def get_connection_info(self) -> ConnectionInfo:
        """URLs, PIN and port for the host to display"""
        if not self._running:
            return ConnectionInfo(urls=[], pin=self.pin or "", port=0)
        return build_connection_info(self._port, self.pin)

    async def stop(self) -> None:
        """Unregister and shut down; safe to call at any time, any number of times"""
        if self.session_id:
            self.registry.unregister(self.session_id)

        if not self._running and self._runner is None:
            return

        logger.info(f"Stopping remote bridge {self.session_id}")
        self._running = False

        # Pending sends are dropped, not flushed
        dropped = self.connections.clear() if self.connections else 0
        if dropped:
            logger.info(f"Dropped {dropped} remote connection(s)")

        if self._sio is not None:
            try:
                await self._sio.shutdown()
            except Exception as e:
                logger.warning(f"Socket.IO shutdown failed: {e}")

        if self._runner is not None:
            await self._runner.cleanup()

        self._sio = None
        self._app = None
        self._runner = None
        self.record = None
        self._port = 0
        logger.info("Remote bridge stopped")
