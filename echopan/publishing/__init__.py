"""Publishing of stored items to messaging channels."""

from .captions import audio_filename, compose_caption
from .downloader import EnclosureDownloader, derive_filename
from .notifier import AudioPayload, Notifier, TelegramNotifier, create_notifier
from .pipeline import ItemOutcome, PublishPipeline, PublishReport

__all__ = [
    "AudioPayload",
    "EnclosureDownloader",
    "ItemOutcome",
    "Notifier",
    "PublishPipeline",
    "PublishReport",
    "TelegramNotifier",
    "audio_filename",
    "compose_caption",
    "create_notifier",
    "derive_filename",
]
