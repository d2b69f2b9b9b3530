"""Processing of incoming wallet messages."""

from __future__ import annotations

import logging

from walletbot.botapi import BotApi, BotApiError, IncomingMessage
from walletbot.calculator import BalanceCalculator
from walletbot.database import Database
from walletbot.errors import WalletBotError
from walletbot.models import BalanceUpdate, BalanceUpdateSource, ParsedMessage
from walletbot.parser import MessageParser

logger = logging.getLogger(__name__)

DUPLICATE_WARNING = "⚠️ 这条消息已经被处理过了，不会重复记录交易。"
PROCESSING_ERROR = "❌ 处理交易时出现错误，请稍后重试或联系管理员。"
FORMAT_HELP = (
    "❌ 消息格式不正确\n\n📋 正确格式：\n#钱包名称 #月份 #年份\n#出账/入账 金额元\n\n"
    "💡 示例：\n#支付宝 #12月 #2024年\n#出账 150.00元\n\n或者：\n"
    "#微信 #01月 #2024年\n#入账 200.00元\n\n❓ 需要帮助请输入 /help"
)


class MessageHandler:
    """Turns wallet messages into balance updates and replies."""

    def __init__(self, db: Database) -> None:
        self.db = db
        self.parser = MessageParser()
        self.calculator = BalanceCalculator(db)

    async def handle_message(self, bot: BotApi, message: IncomingMessage) -> None:
        """Process one message; API failures other than the final notice propagate."""
        chat_id = message.chat.id
        logger.debug(
            "📨 Received message %s in chat %s (%s)",
            message.message_id,
            chat_id,
            message.chat.kind.value,
        )

        text = message.text
        if text is None or not self.parser.is_wallet_message(text):
            return

        try:
            processed = self.db.is_message_processed(message.message_id, chat_id)
        except WalletBotError as error:
            logger.warning("Failed to check message processing status: %s", error)
            processed = False
        if processed:
            logger.debug("⚠️ Message %s already processed, skipping", message.message_id)
            await bot.send_message(chat_id, DUPLICATE_WARNING)
            return

        if self.parser.has_total(text):
            logger.debug("📈 Message already has total, switching to manual edit mode")
            await self._handle_message_with_total(bot, message, text)
            return

        parsed = self.parser.parse(text)
        if parsed is None:
            logger.warning("Failed to parse wallet message: %s", text)
            await bot.send_message(chat_id, FORMAT_HELP)
            return

        try:
            update = self.calculator.smart_calculate_balance(
                chat_id,
                parsed.wallet_name,
                parsed.transaction_type,
                parsed.amount,
                parsed.month,
                parsed.year,
                parsed.total_amount,
                message.message_id,
            )
        except WalletBotError as error:
            logger.error("Failed to calculate balance: %s", error)
            await bot.send_message(chat_id, PROCESSING_ERROR)
            return

        await bot.edit_message_text(
            chat_id, message.message_id, f"{text}\n#总额 {update.new_balance:.2f}元"
        )
        self._record(message, parsed, update)
        await bot.send_message(
            chat_id,
            f"✅ 交易已记录\n📊 钱包：{parsed.wallet_name}\n"
            f"💰 当前余额：{update.new_balance:.2f}元",
        )

        if update.source is BalanceUpdateSource.TRANSACTION:
            logger.info(
                "Successfully processed transaction: %s %s -> %s",
                parsed.wallet_name,
                update.old_balance,
                update.new_balance,
            )
        elif update.source is BalanceUpdateSource.MANUAL_EDIT:
            logger.info(
                "Successfully updated balance from manual edit: %s %s -> %s",
                parsed.wallet_name,
                update.old_balance,
                update.new_balance,
            )
        else:
            logger.info(
                "Successfully set initial balance: %s -> %s",
                parsed.wallet_name,
                update.new_balance,
            )

    async def _handle_message_with_total(
        self, bot: BotApi, message: IncomingMessage, text: str
    ) -> None:
        parsed = self.parser.parse(text)
        if parsed is None or parsed.total_amount is None:
            return

        chat_id = message.chat.id
        try:
            update = self.calculator.update_from_manual_total(
                chat_id, parsed.wallet_name, parsed.total_amount, message.message_id
            )
        except WalletBotError as error:
            logger.error("Failed to update balance from manual total: %s", error)
            return

        self._record(message, parsed, update)
        try:
            await bot.send_message(
                chat_id,
                f"✅ 余额已更新（手动总额）\n📊 钱包：{parsed.wallet_name}\n"
                f"💰 当前余额：{update.new_balance:.2f}元",
            )
        except BotApiError as error:
            logger.warning("Failed to send confirmation: %s", error)

        logger.info(
            "Successfully processed message with manual total: %s %s -> %s",
            parsed.wallet_name,
            update.old_balance,
            update.new_balance,
        )

    def _record(
        self, message: IncomingMessage, parsed: ParsedMessage, update: BalanceUpdate
    ) -> None:
        """Store the transaction and the message state, logging failures."""
        chat_id = message.chat.id
        try:
            self.db.record_transaction(
                chat_id,
                parsed.wallet_name,
                parsed.transaction_type,
                parsed.amount,
                parsed.month,
                parsed.year,
                message.message_id,
            )
        except WalletBotError as error:
            logger.error("Failed to record transaction: %s", error)

        try:
            self.db.record_message(
                message.message_id,
                chat_id,
                parsed.wallet_name,
                True,
                update.old_balance,
                update.new_balance,
            )
        except WalletBotError as error:
            logger.error("Failed to record message: %s", error)

    async def reprocess_message(self, bot: BotApi, message: IncomingMessage) -> None:
        """Run a message through the handler again."""
        logger.info("Reprocessing message: %s", message.message_id)
        await self.handle_message(bot, message)