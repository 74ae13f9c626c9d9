import logging
from collections.abc import Iterable

from mfg_attachments.errors import AttachmentApiError
from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.services.attachment_api import AttachmentApiClient
from mfg_attachments.services.notifications import (
    LoggingNotifier,
    Notifier,
    UploadCompleteHandler,
    maybe_await,
)

logger = logging.getLogger(__name__)


class AttachmentListView:
    """Snapshot of a work order's attachments, re-fetched after every mutation."""

    def __init__(
        self,
        client: AttachmentApiClient,
        work_order_id: str,
        *,
        category: str | None = None,
        kinds: Iterable[str] = (),
        on_upload_complete: UploadCompleteHandler | None = None,
        notifier: Notifier | None = None,
    ):
        self.client = client
        self.work_order_id = work_order_id
        self.category = category
        self.kinds = tuple(kinds)
        self.on_upload_complete = on_upload_complete
        self.notifier = notifier or LoggingNotifier()
        self._attachments: tuple[Attachment, ...] = ()
        self.loading = False

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    @property
    def visible(self) -> list[Attachment]:
        """Attachments filed under this station, optionally narrowed to some kinds."""
        return [
            att
            for att in self._attachments
            if (self.category is None or att.category == self.category)
            and (not self.kinds or att.kind in self.kinds)
        ]

    def find(self, filename: str) -> Attachment | None:
        for att in self._attachments:
            if att.filename == filename:
                return att
        return None

    async def refresh(self, *, notify_parent: bool = False) -> list[Attachment]:
        self.loading = True
        try:
            fetched = await self.client.list_attachments(self.work_order_id)
        except AttachmentApiError as exc:
            self.notifier.notify("Failed to load attachments", exc.message, error=True)
            return self.attachments
        finally:
            self.loading = False

        # Replace wholesale; concurrent refreshes are last-write-wins.
        self._attachments = tuple(fetched)
        logger.debug("Loaded %d attachments for work order %s", len(fetched), self.work_order_id)
        if notify_parent and self.on_upload_complete is not None:
            await maybe_await(self.on_upload_complete(self.attachments))
        return self.attachments
