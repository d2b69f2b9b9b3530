import asyncio

import pytest

from walletbot.botapi import BotApi, BotApiError, Chat, ChatKind, IncomingMessage
from walletbot.errors import ErrorSeverity, TelegramError


@pytest.mark.parametrize(
    "kind, public",
    [
        (ChatKind.PRIVATE, False),
        (ChatKind.GROUP, True),
        (ChatKind.SUPERGROUP, True),
        (ChatKind.CHANNEL, True),
    ],
)
def test_chat_is_public(kind, public):
    assert Chat(12345, kind).is_public() is public


def test_chat_defaults_to_private():
    chat = Chat(12345)
    assert chat.kind is ChatKind.PRIVATE
    assert chat.is_public() is False


def test_message_defaults_and_chat_id():
    message = IncomingMessage(7, Chat(67890, ChatKind.CHANNEL, "频道"))
    assert message.chat_id == 67890
    assert message.text is None
    assert message.reply_to is None


def test_message_reply_chain():
    original = IncomingMessage(1, Chat(12345), "测试消息")
    reply = IncomingMessage(2, Chat(12345), "/reprocess", reply_to=original)
    assert reply.reply_to.text == "测试消息"


def test_bot_api_is_abstract():
    with pytest.raises(TypeError):
        BotApi()


class _SendOnly(BotApi):
    async def send_message(self, chat_id, text):
        return IncomingMessage(1, Chat(chat_id), text)


class _Complete(_SendOnly):
    async def edit_message_text(self, chat_id, message_id, text):
        return IncomingMessage(message_id, Chat(chat_id), text)

    async def delete_message(self, chat_id, message_id):
        return None

    async def reply_to_message(self, message, text):
        return await self.send_message(message.chat.id, text)


def test_partial_bot_api_cannot_be_created():
    with pytest.raises(TypeError):
        _SendOnly()

    original = IncomingMessage(4, Chat(9, ChatKind.GROUP), "question")
    reply = asyncio.run(_Complete().reply_to_message(original, "answer"))
    assert reply.chat_id == 9
    assert reply.text == "answer"


def test_bot_api_error_is_retryable_telegram_error():
    error = BotApiError("Mock error")
    assert isinstance(error, TelegramError)
    assert error.is_retryable() is True
    assert error.severity() is ErrorSeverity.MEDIUM
    assert str(error) == "Telegram API error: Mock error"