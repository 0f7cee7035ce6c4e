# Tests del CLI (sin LLM real: el ChatService se mockea)
# Ejecutar con: pytest tests/test_cli.py -v

import argparse
import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch


def make_args(**overrides):
    values = dict(
        clear=False,
        history=False,
        conversation=None,
        limit=None,
        message=None,
        user=None,
        system=None,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def cli_service():
    service = MagicMock()
    service.clear_history = AsyncMock(return_value={"success": True})
    service.get_history = AsyncMock(return_value={"messages": [], "totalMessages": 0})
    with patch("adapters.inbound.cli.create_chat_service", return_value=service):
        yield service


@pytest.mark.unit
class TestRunCommand:
    """Tests para run_command"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("flag", ["history", "clear"])
    async def test_memory_backend_warns(self, cli_service, monkeypatch, caplog, flag):
        from config.settings import settings
        from adapters.inbound.cli import run_command

        monkeypatch.setattr(settings.storage, "backend", "memory")
        with caplog.at_level(logging.WARNING, logger="adapters.inbound.cli"):
            await run_command(make_args(**{flag: True}))

        assert any("STORAGE_BACKEND=memory" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_redis_backend_does_not_warn(self, cli_service, monkeypatch, caplog):
        from config.settings import settings
        from adapters.inbound.cli import run_command

        monkeypatch.setattr(settings.storage, "backend", "redis")
        with caplog.at_level(logging.WARNING, logger="adapters.inbound.cli"):
            result = await run_command(make_args(clear=True, conversation="c"))

        assert result == {"success": True}
        cli_service.clear_history.assert_awaited_once_with("c")
        assert not any("STORAGE_BACKEND" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_history_passes_limit(self, cli_service):
        from adapters.inbound.cli import run_command

        await run_command(make_args(history=True, conversation="c", limit=5))
        cli_service.get_history.assert_awaited_once_with("c", 5)
