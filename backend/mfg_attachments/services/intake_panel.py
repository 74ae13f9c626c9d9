import logging
from collections.abc import Iterable
from pathlib import Path

from mfg_attachments.errors import AttachmentApiError, GateBusyError
from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.schemas.upload import PendingUploadItem
from mfg_attachments.services.attachment_api import AttachmentApiClient
from mfg_attachments.services.attachment_list import AttachmentListView
from mfg_attachments.services.metadata_gate import MetadataGate
from mfg_attachments.services.notifications import (
    Confirmer,
    FilePicker,
    LoggingNotifier,
    Notifier,
    UploadCompleteHandler,
)
from mfg_attachments.services.revision import RevisionController
from mfg_attachments.services.upload_queue import TaskListener, UploadQueue
from mfg_attachments.services.validator import validate
from mfg_attachments.stations import StationConfig
from mfg_attachments.utils.filesystem import StagedFile, sanitize_filename

logger = logging.getLogger(__name__)


class IntakePanel:
    """Upload surface for one station of one work order.

    Selected or dropped files go through validation, the identifier gate and
    the upload queue; existing attachments can be deleted, downloaded or
    replaced.
    """

    def __init__(
        self,
        client: AttachmentApiClient,
        work_order_id: str,
        station: StationConfig,
        *,
        picker: FilePicker | None = None,
        notifier: Notifier | None = None,
        confirmer: Confirmer | None = None,
        on_upload_complete: UploadCompleteHandler | None = None,
        retention_seconds: float | None = None,
        task_listener: TaskListener | None = None,
    ):
        if not work_order_id:
            raise ValueError("Choose a work order before uploading files.")
        self.client = client
        self.work_order_id = work_order_id
        self.station = station
        self.picker = picker
        self.notifier = notifier or LoggingNotifier()
        self.confirmer = confirmer

        self.list_view = AttachmentListView(
            client,
            work_order_id,
            category=station.category,
            kinds=station.display_kinds,
            on_upload_complete=on_upload_complete,
            notifier=self.notifier,
        )
        self.gate = MetadataGate(station)
        self.queue = UploadQueue(
            client,
            work_order_id,
            station,
            list_view=self.list_view,
            notifier=self.notifier,
            retention_seconds=retention_seconds,
            listener=task_listener,
        )
        self.revisions = (
            RevisionController(
                client,
                work_order_id,
                gate=self.gate,
                queue=self.queue,
                picker=picker,
                list_view=self.list_view,
                notifier=self.notifier,
            )
            if picker is not None
            else None
        )

    @property
    def attachments(self) -> list[Attachment]:
        return self.list_view.visible

    async def load(self) -> list[Attachment]:
        return await self.list_view.refresh()

    async def browse(self) -> bool:
        if self.picker is None:
            raise RuntimeError("No file picker attached to this panel")
        files = await self.picker.choose(self.station.accept, multiple=True)
        if not files:
            return False
        return await self.upload_files(files)

    async def upload_files(self, files: Iterable[StagedFile]) -> bool:
        """Validate, ask for the identifier, then queue. Returns False if nothing was queued."""
        result = validate(files, self.station)
        if result.rejected:
            self.notifier.notify("Invalid files", result.message, error=True)
        if not result.accepted:
            return False

        try:
            decision = await self.gate.request_metadata(
                [PendingUploadItem(file) for file in result.accepted]
            )
        except GateBusyError:
            self.notifier.notify(
                "Upload not started", f"Finish the open {self.gate.label} prompt first.", error=True
            )
            return False
        if decision is None:
            return False
        self.queue.enqueue(decision.files, decision.identifier, description=decision.description)
        return True

    async def reupload(self, attachment: Attachment) -> bool:
        if self.revisions is None:
            raise RuntimeError("No file picker attached to this panel")
        return await self.revisions.reupload(attachment)

    async def delete(self, filename: str) -> bool:
        if self.confirmer is not None:
            if not await self.confirmer.confirm(f"Are you sure you want to delete {filename}?"):
                return False
        try:
            await self.client.delete_attachment(self.work_order_id, filename)
        except AttachmentApiError as exc:
            self.notifier.notify("Delete failed", exc.message, error=True)
            return False
        self.notifier.notify("File deleted successfully")
        await self.list_view.refresh(notify_parent=True)
        return True

    async def download(self, filename: str, directory: Path | str) -> Path | None:
        try:
            content = await self.client.download_attachment(self.work_order_id, filename)
        except AttachmentApiError as exc:
            self.notifier.notify("Download failed", exc.message, error=True)
            return None
        attachment = self.list_view.find(filename)
        name = attachment.display_name if attachment else filename
        target = Path(directory) / sanitize_filename(name)
        target.write_bytes(content)
        logger.info("Downloaded %s to %s", filename, target)
        return target

    async def drain(self) -> None:
        await self.queue.join()

    async def aclose(self) -> None:
        self.gate.cancel()
        await self.queue.close()
