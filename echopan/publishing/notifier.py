"""Outbound delivery of audio to messaging channels."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel, Field
from telegram import Bot, InputFile
from telegram.constants import ParseMode
from telegram.error import InvalidToken, TelegramError
from telegram.request import HTTPXRequest

from ..config import TelegramConfig
from ..errors import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)


class AudioPayload(BaseModel):
    """Audio file to deliver."""

    path: Path = Field(..., description="Local file")
    mime_type: str = Field("audio/mpeg", description="MIME type")
    filename: str = Field(..., description="Filename shown to recipients")


class Notifier(Protocol):
    """Anything that can deliver an audio payload to a channel."""

    def send(self, channel_id: int, payload: AudioPayload, caption: str) -> None:
        """Deliver the payload. Raises DeliveryError on failure."""
        ...


class TelegramNotifier:
    """Send audio to Telegram channels through the Bot API."""

    def __init__(self, token: str, api_url: Optional[str] = None, poll_timeout: float = 10.0) -> None:
        """Initialize notifier."""
        self.token = token
        self.api_url = api_url
        self.poll_timeout = poll_timeout

    def _bot(self) -> Bot:
        kwargs = {
            # Only relevant for polling; sending never waits on it
            "get_updates_request": HTTPXRequest(read_timeout=self.poll_timeout),
        }
        if self.api_url:
            kwargs["base_url"] = f"{self.api_url.rstrip('/')}/bot"
        try:
            return Bot(token=self.token, **kwargs)
        except InvalidToken as e:
            raise ConfigurationError(f"failed to create Telegram bot: {e}") from e

    async def _send(self, channel_id: int, payload: AudioPayload, caption: str) -> None:
        async with self._bot() as bot:
            with open(payload.path, "rb") as fh:
                audio = InputFile(fh, filename=payload.filename)
            # InputFile guesses the type from the filename
            audio.mimetype = payload.mime_type
            await bot.send_audio(
                chat_id=channel_id,
                audio=audio,
                caption=caption,
                parse_mode=ParseMode.MARKDOWN,
            )

    def send(self, channel_id: int, payload: AudioPayload, caption: str) -> None:
        """
        Send an audio file with a Markdown caption.

        Raises:
            ConfigurationError: the bot token is rejected
            DeliveryError: any other delivery failure
        """
        logger.debug("Sending %s to channel %s", payload.path, channel_id)
        try:
            asyncio.run(self._send(channel_id, payload, caption))
        except InvalidToken as e:
            raise ConfigurationError(f"failed to create Telegram bot: {e}") from e
        except TelegramError as e:
            raise DeliveryError(e.message) from e
        except OSError as e:
            raise DeliveryError(f"cannot read {payload.path}: {e}") from e


def create_notifier(settings: TelegramConfig) -> TelegramNotifier:
    """
    Build the Telegram notifier from configuration.

    Raises:
        ConfigurationError: no bot token is configured
    """
    if not settings.token:
        env_name = settings.token_env or "EP_TG_BOT_TOKEN"
        logger.error("%s is not set", env_name)
        raise ConfigurationError(f"{env_name} is not set")

    return TelegramNotifier(
        token=settings.token,
        api_url=settings.api_url,
        poll_timeout=settings.poll_timeout,
    )
