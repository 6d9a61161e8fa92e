"""Command handlers: /start, /balance, /deposit"""

import logging

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import Application, CommandHandler, ContextTypes

from app_context import get_app_context
from utils.ton_amounts import format_ton

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome! Use /balance to check your balance or /deposit to top up your account."


def deposit_link(address: str, user_id: int) -> str:
    """ton:// transfer link with the user id prefilled as the comment"""
    return f"ton://transfer/{address}?text={user_id}"


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Register the sender on first contact and greet them"""
    if not update.effective_user or not update.message:
        return

    app_context = get_app_context(context.application)
    user_id = update.effective_user.id

    if not await app_context.ledger.exists(user_id):
        await app_context.ledger.create(user_id)

    await update.message.reply_text(WELCOME_TEXT)


async def balance_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not update.effective_user or not update.message:
        return

    app_context = get_app_context(context.application)
    balance = await app_context.ledger.get(update.effective_user.id)
    await update.message.reply_text(f"Your balance is: {format_ton(balance)} TON")


async def deposit_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show the deposit address and the comment that routes the payment to this user"""
    if not update.effective_user or not update.message:
        return

    app_context = get_app_context(context.application)
    user_id = update.effective_user.id
    address = app_context.deposit_address

    keyboard = InlineKeyboardMarkup(
        [[InlineKeyboardButton("Deposit", url=deposit_link(address, user_id))]]
    )
    await update.message.reply_text(
        f"Send TON to this address:\n{address}\nInclude this comment: {user_id}",
        reply_markup=keyboard,
    )


def register_command_handlers(application: Application) -> None:
    """Register the user command handlers"""
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("balance", balance_command))
    application.add_handler(CommandHandler("deposit", deposit_command))

    logger.info("✅ Command handlers registered")
