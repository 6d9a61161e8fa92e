"""
Telegram notifier tests
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.constants import ParseMode
from telegram.error import Forbidden, NetworkError

from services.telegram_notification_service import TelegramNotifier


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    return bot


class TestTelegramNotifier:
    @pytest.mark.asyncio
    async def test_send_uses_markdown_private_chat(self, bot):
        assert await TelegramNotifier(bot).send(42, "*hi*") is True
        bot.send_message.assert_awaited_once_with(chat_id=42, text="*hi*", parse_mode=ParseMode.MARKDOWN)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [Forbidden("bot was blocked by the user"), NetworkError("timed out")])
    async def test_telegram_errors_are_reported_not_raised(self, bot, error):
        bot.send_message.side_effect = error
        assert await TelegramNotifier(bot).send(42, "hi") is False
        assert bot.send_message.await_count == 1
