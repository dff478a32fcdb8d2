"""
Unit tests for the command line entry point
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from remote_bridge import main as entry
from remote_bridge.exceptions import NoPortAvailableError
from remote_bridge.server.network_info import ConnectionInfo
from remote_bridge.utils.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("REMOTE_ENABLED", "REMOTE_PORT", "REMOTE_LABEL", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)


class TestLoadConfig:
    """Test cases for configuration loading from the command line"""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = entry.load_config()
        assert config.remote.port == Config.default().remote.port

    def test_explicit_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            entry.load_config(str(tmp_path / "nope.json"))
        assert exc_info.value.code == 1

    def test_invalid_file_exits(self, tmp_path):
        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps({"remote": {"port": 0}}))
        with pytest.raises(SystemExit):
            entry.load_config(str(config_path))


class TestBanner:
    def test_banner_contents(self):
        info = ConnectionInfo(
            urls=["http://localhost:3000", "http://192.168.1.20:3000"],
            pin="0427",
            port=3000
        )

        banner = entry.format_connection_banner(info)

        assert "http://localhost:3000" in banner
        assert "http://192.168.1.20:3000" in banner
        assert "PIN: 0427" in banner
        assert "http://192.168.1.20:3000?pin=0427" in banner


class TestMain:
    """Test cases for the async main function"""

    @pytest.mark.asyncio
    async def test_auto_start_disabled(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert await entry.main([]) == 0
        assert "auto-start is disabled" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_startup_failure_returns_one(self, tmp_path, monkeypatch, capsys):
        """Test that a port failure is reported and yields a non-zero exit"""
        monkeypatch.chdir(tmp_path)

        with patch.object(entry.RemoteBridge, "start",
                          AsyncMock(side_effect=NoPortAvailableError(3000, 100))):
            assert await entry.main(["--start"]) == 1

        out = capsys.readouterr().out
        assert "port" in out.lower()

    def test_parser(self):
        args = entry.build_parser().parse_args(["--port", "4000", "--label", "X", "--start"])
        assert args.port == 4000
        assert args.label == "X"
        assert args.start is True
        assert args.config is None


if __name__ == "__main__":
    pytest.main([__file__])
