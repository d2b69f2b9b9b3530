"""Chat message types and the interface to the messaging API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from walletbot.errors import TelegramError


class ChatKind(Enum):
    """The kind of chat a message belongs to."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


@dataclass
class Chat:
    """A chat: a private conversation, a group or a channel."""

    id: int
    kind: ChatKind = ChatKind.PRIVATE
    title: str | None = None

    def is_public(self) -> bool:
        """Whether this is a group, supergroup or channel."""
        return self.kind is not ChatKind.PRIVATE


@dataclass
class IncomingMessage:
    """A message as the bot sees it."""

    message_id: int
    chat: Chat
    text: str | None = None
    sender: str | None = None
    reply_to: IncomingMessage | None = None

    @property
    def chat_id(self) -> int:
        return self.chat.id


class BotApiError(TelegramError):
    """A request to the messaging API failed."""


class BotApi(ABC):
    """The operations the bot needs from the messaging API."""

    @abstractmethod
    async def send_message(self, chat_id: int, text: str) -> IncomingMessage:
        """Send a text message to a chat."""

    @abstractmethod
    async def edit_message_text(
        self, chat_id: int, message_id: int, text: str
    ) -> IncomingMessage:
        """Replace the text of a message."""

    @abstractmethod
    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a message."""

    @abstractmethod
    async def reply_to_message(
        self, message: IncomingMessage, text: str
    ) -> IncomingMessage:
        """Send a text message as a reply to another message."""