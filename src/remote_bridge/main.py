#!/usr/bin/env python3
"""
Remote Bridge - Main Entry Point

Serves the live state of a local session to phones, tablets and browsers
on the same network.
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from remote_bridge import __version__
from remote_bridge.core.session_registry import SessionRegistry
from remote_bridge.exceptions import BridgeStartupError
from remote_bridge.host.local_state import LocalStateOwner
from remote_bridge.server.bridge_server import RemoteBridge
from remote_bridge.server.network_info import ConnectionInfo
from remote_bridge.utils.config import Config
from remote_bridge.utils.error_handler import ErrorHandler
from remote_bridge.utils.logging_setup import parse_size, setup_logging

DEFAULT_CONFIG_PATH = "config/remote_config.json"


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, or defaults when no file exists"""
    explicit = config_path is not None
    config_file = Path(config_path or DEFAULT_CONFIG_PATH)

    if not config_file.exists():
        if explicit:
            print(f"❌ Configuration file not found: {config_file}")
            sys.exit(1)
        return Config.default()

    try:
        config = Config.load_from_file(config_file)
        config.validate()
        return config
    except Exception as e:
        print(f"❌ Failed to load configuration: {e}")
        print("📖 Please check your configuration file format.")
        sys.exit(1)


def format_connection_banner(info: ConnectionInfo) -> str:
    """Text shown to the user once the bridge is listening"""
    lines = [
        "=" * 50,
        "  Remote Bridge Started",
        "=" * 50,
        "",
        "📱 Access from your phone or browser:",
        "",
    ]
    lines.extend(f"   {url}" for url in info.urls)
    lines.extend([
        "",
        f"🔐 PIN: {info.pin}",
        "",
        f"🔗 Share URL: {info.share_url()}",
        "",
        "Tip: Use the network URL (192.168.x.x) to access from mobile",
        "=" * 50,
    ])
    return "\n".join(lines)


class RemoteBridgeApp:
    """Main Remote Bridge application"""

    def __init__(self, config: Config, label: Optional[str] = None):
        self.config = config
        self.label = label or config.remote.label
        self.registry = SessionRegistry()
        self.state_owner = LocalStateOwner()
        self.error_handler = ErrorHandler()
        self.bridge: Optional[RemoteBridge] = None
        self.logger = logging.getLogger(__name__)
        self.running = False

    async def start(self, preferred_port: Optional[int] = None) -> ConnectionInfo:
        """Start the remote bridge"""
        self.logger.info("🚀 Starting Remote Bridge...")

        self.bridge = RemoteBridge(
            state_owner=self.state_owner,
            registry=self.registry,
            config=self.config.remote,
            label=self.label,
            error_handler=self.error_handler
        )
        self.state_owner.set_broadcast_callback(self.bridge.broadcast)

        try:
            await self.bridge.start(preferred_port or self.config.remote.port)
        except BridgeStartupError as e:
            message = await self.error_handler.handle_startup_error(e)
            print(f"❌ {message}")
            raise

        self.running = True
        info = self.bridge.get_connection_info()
        self.logger.info(f"✅ Remote Bridge listening on port {info.port}")
        print(format_connection_banner(info))
        return info

    async def stop(self) -> None:
        """Stop Remote Bridge application"""
        if self.bridge is None:
            return

        self.logger.info("🛑 Stopping Remote Bridge...")
        self.running = False
        self.state_owner.save_current_session_to_history()
        await self.bridge.stop()
        self.logger.info("✅ Remote Bridge stopped successfully")

    async def serve_forever(self) -> None:
        while self.running:
            await asyncio.sleep(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Remote Bridge - drive a local session from any device on your network"
    )
    parser.add_argument(
        "--config", "-c",
        help=f"Configuration file path (default: {DEFAULT_CONFIG_PATH})",
        default=None
    )
    parser.add_argument("--port", "-p", type=int, default=None, help="Preferred port")
    parser.add_argument("--label", "-l", default=None, help="Session name shown to clients")
    parser.add_argument(
        "--start", "-s",
        action="store_true",
        help="Start the remote server even if auto-start is disabled"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"Remote Bridge {__version__}"
    )
    return parser


async def main(argv: Optional[list] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except SystemExit as e:
        return int(e.code or 1)

    setup_logging(
        config.logging.level,
        config.logging.file,
        max_bytes=parse_size(config.logging.max_size),
        backup_count=config.logging.backup_count
    )
    logger = logging.getLogger(__name__)

    if not (config.remote.enabled or args.start):
        print("ℹ️ Remote server auto-start is disabled. Use --start or set REMOTE_ENABLED=true.")
        return 0

    app = RemoteBridgeApp(config, label=args.label)

    try:
        await app.start(args.port)
        print("🛑 Press Ctrl+C to stop")
        await app.serve_forever()
    except BridgeStartupError:
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("🛑 Received interrupt signal")
        print("\n🛑 Shutting down Remote Bridge...")
    finally:
        await app.stop()

    print("👋 Remote Bridge stopped")
    return 0


def run() -> None:
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")


if __name__ == "__main__":
    run()
