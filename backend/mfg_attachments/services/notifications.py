import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.utils.filesystem import StagedFile

logger = logging.getLogger(__name__)

# Called with the refreshed attachment set after an upload or delete.
UploadCompleteHandler = Callable[[list[Attachment]], Awaitable[None] | None]


class Notifier(Protocol):
    def notify(self, title: str, description: str | None = None, *, error: bool = False) -> None:
        ...


class FilePicker(Protocol):
    async def choose(self, accept: str, *, multiple: bool = True) -> Sequence[StagedFile]:
        ...


class Confirmer(Protocol):
    async def confirm(self, question: str) -> bool:
        ...


class LoggingNotifier:
    """Notifier used when no UI sink is attached; writes toasts to the log."""

    def notify(self, title: str, description: str | None = None, *, error: bool = False) -> None:
        text = f"{title}: {description}" if description else title
        if error:
            logger.warning(text)
        else:
            logger.info(text)


async def maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result
