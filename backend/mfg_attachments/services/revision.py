import logging

from mfg_attachments.errors import AttachmentApiError, GateBusyError
from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.schemas.upload import PendingUploadItem
from mfg_attachments.services.attachment_api import AttachmentApiClient
from mfg_attachments.services.attachment_list import AttachmentListView
from mfg_attachments.services.metadata_gate import MetadataGate
from mfg_attachments.services.notifications import FilePicker, LoggingNotifier, Notifier
from mfg_attachments.services.upload_queue import UploadQueue
from mfg_attachments.services.validator import validate
from mfg_attachments.stations import ALL_EXTENSIONS

logger = logging.getLogger(__name__)

REUPLOAD_ACCEPT = ",".join(ALL_EXTENSIONS)


class RevisionController:
    """Replaces an existing attachment: delete the old file, then upload the new one.

    The old attachment must be gone before the replacement is queued, so a
    logical slot never holds two files of the same kind.
    """

    def __init__(
        self,
        client: AttachmentApiClient,
        work_order_id: str,
        *,
        gate: MetadataGate,
        queue: UploadQueue,
        picker: FilePicker,
        list_view: AttachmentListView | None = None,
        notifier: Notifier | None = None,
    ):
        self.client = client
        self.work_order_id = work_order_id
        self.gate = gate
        self.queue = queue
        self.picker = picker
        self.list_view = list_view
        self.notifier = notifier or LoggingNotifier()

    async def reupload(self, existing: Attachment) -> bool:
        # Not limited to the station's own types: the operator is replacing a known file.
        chosen = await self.picker.choose(REUPLOAD_ACCEPT, multiple=False)
        if not chosen:
            return False

        result = validate(chosen[:1], self.gate.station)
        if result.rejected:
            self.notifier.notify("Invalid files", result.message, error=True)
            return False
        file = result.accepted[0]

        try:
            decision = await self.gate.request_metadata(
                [PendingUploadItem(file, is_replacement_for=existing)],
                replacement_target=existing,
            )
        except GateBusyError:
            self.notifier.notify(
                "Reupload not started", f"Finish the open {self.gate.label} prompt first.", error=True
            )
            return False
        if decision is None:
            logger.info("Reupload of %s cancelled", existing.filename)
            return False

        try:
            await self.client.delete_attachment(self.work_order_id, existing.filename)
        except AttachmentApiError as exc:
            self.notifier.notify("Failed to remove old file", exc.message, error=True)
            return False
        self.notifier.notify("Old file removed successfully")
        if self.list_view is not None:
            await self.list_view.refresh(notify_parent=True)

        self.queue.enqueue(
            [file],
            decision.identifier,
            description=decision.description,
            replaces=existing,
        )
        return True
