"""Tests for the Telegram notifier."""
import pytest
from telegram.constants import ParseMode
from telegram.error import BadRequest, InvalidToken, NetworkError

from echopan.config import TelegramConfig
from echopan.errors import ConfigurationError, DeliveryError
from echopan.publishing import AudioPayload, TelegramNotifier, create_notifier


def test_create_notifier_requires_token():
    """A missing token should be a configuration error."""
    with pytest.raises(ConfigurationError, match="EP_TG_BOT_TOKEN is not set"):
        create_notifier(TelegramConfig())


def test_create_notifier_uses_settings():
    """The notifier should carry token, endpoint and poll timeout."""
    notifier = create_notifier(
        TelegramConfig(token="123:abc", api_url="http://localhost:8081/", poll_timeout=5)
    )

    assert notifier.token == "123:abc"
    assert notifier.api_url == "http://localhost:8081/"
    assert notifier.poll_timeout == 5


def test_bot_uses_custom_endpoint():
    """A configured API URL should replace the public Bot API endpoint."""
    bot = TelegramNotifier("123:abc", api_url="http://localhost:8081/")._bot()

    assert bot.base_url.startswith("http://localhost:8081/bot")


def test_send_passes_audio_and_markdown_caption(monkeypatch, tmp_path):
    """send should deliver the file with its filename, MIME type, caption and Markdown mode."""
    audio_path = tmp_path / "ep.mp3"
    audio_path.write_bytes(b"ID3")
    calls = []

    class FakeBot:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return False

        async def send_audio(self, **kwargs):
            audio = kwargs.pop("audio")
            calls.append(
                {**kwargs, "audio": (audio.input_file_content, audio.filename, audio.mimetype)}
            )

    notifier = TelegramNotifier("123:abc")
    monkeypatch.setattr(notifier, "_bot", lambda: FakeBot())

    payload = AudioPayload(path=audio_path, mime_type="audio/x-m4a", filename="*Ep*.mp3")
    notifier.send(-100, payload, "*Ep*\n\nsub")

    assert calls == [
        {
            "chat_id": -100,
            "audio": (b"ID3", "*Ep*.mp3", "audio/x-m4a"),
            "caption": "*Ep*\n\nsub",
            "parse_mode": ParseMode.MARKDOWN,
        }
    ]


@pytest.mark.parametrize(
    "error,expected",
    [
        (BadRequest("text must be encoded in UTF-8"), DeliveryError),
        (NetworkError("File too large. Check telegram api limits"), DeliveryError),
        (InvalidToken("Not Found"), ConfigurationError),
    ],
)
def test_send_maps_telegram_errors(monkeypatch, tmp_path, error, expected):
    """Telegram errors should map to delivery or configuration errors."""
    audio_path = tmp_path / "ep.mp3"
    audio_path.write_bytes(b"ID3")

    async def failing_send(channel_id, payload, caption):
        raise error

    notifier = TelegramNotifier("123:abc")
    monkeypatch.setattr(notifier, "_send", failing_send)

    with pytest.raises(expected):
        notifier.send(-100, AudioPayload(path=audio_path, filename="x.mp3"), "caption")


def test_send_keeps_server_message(monkeypatch, tmp_path):
    """The delivery error should carry the server's message text."""

    async def failing_send(channel_id, payload, caption):
        raise BadRequest("Request Entity Too Large")

    notifier = TelegramNotifier("123:abc")
    monkeypatch.setattr(notifier, "_send", failing_send)

    with pytest.raises(DeliveryError, match="Request Entity Too Large"):
        notifier.send(-100, AudioPayload(path=tmp_path / "ep.mp3", filename="x.mp3"), "caption")
