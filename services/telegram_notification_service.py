"""
Direct Telegram Notification Service

Deposit confirmations go straight to the paying user's private chat. Delivery
is fire-and-forget: failures are logged and never retried.
"""

import logging

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError

from utils.ton_amounts import format_ton

logger = logging.getLogger(__name__)


def format_deposit_confirmation(amount: int) -> str:
    """Markdown confirmation text for a credited nanoTON amount"""
    return f"Deposit confirmed!\n*+{format_ton(amount)} TON*"


class TelegramNotifier:
    """Sends messages to users by Telegram user id"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(self, user_id: int, text: str) -> bool:
        """
        Send a Markdown message to a user.

        Args:
            user_id: Telegram user id (private chat id)
            text: Message text

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            await self.bot.send_message(chat_id=user_id, text=text, parse_mode=ParseMode.MARKDOWN)
            logger.info(f"✅ TELEGRAM_SENT: user={user_id}")
            return True
        except TelegramError as e:
            logger.error(f"❌ TELEGRAM_ERROR: user={user_id}, error={e}")
            return False
