import asyncio
import itertools
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from mfg_attachments.config import settings
from mfg_attachments.errors import AttachmentApiError
from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.schemas.upload import TaskStatus, UploadPayload, UploadTask
from mfg_attachments.services.attachment_api import AttachmentApiClient
from mfg_attachments.services.attachment_list import AttachmentListView
from mfg_attachments.services.classifier import classify, resolve_kind
from mfg_attachments.services.notifications import LoggingNotifier, Notifier
from mfg_attachments.stations import StationConfig
from mfg_attachments.utils.filesystem import StagedFile

logger = logging.getLogger(__name__)

TaskListener = Callable[[Mapping[str, UploadTask]], None]

_sequence = itertools.count(1)


def new_task_id(filename: str) -> str:
    return f"{int(time.time() * 1000)}-{next(_sequence)}-{filename}"


@dataclass(frozen=True)
class _Job:
    file: StagedFile
    identifier: str
    description: str | None = None
    replaces: Attachment | None = None


class UploadQueue:
    """Sends validated files to the attachment API one request at a time.

    A single worker consumes the job queue, so the next file's task is only
    created once the previous request has settled. Failures are recorded on
    the file's own task and never stop the files behind it.
    """

    def __init__(
        self,
        client: AttachmentApiClient,
        work_order_id: str,
        station: StationConfig,
        *,
        list_view: AttachmentListView | None = None,
        notifier: Notifier | None = None,
        retention_seconds: float | None = None,
        listener: TaskListener | None = None,
    ):
        self.client = client
        self.work_order_id = work_order_id
        self.station = station
        self.list_view = list_view
        self.notifier = notifier or LoggingNotifier()
        self.retention_seconds = (
            settings.task_retention_seconds if retention_seconds is None else retention_seconds
        )
        self.listener = listener
        self._tasks: dict[str, UploadTask] = {}
        self._jobs: asyncio.Queue[_Job] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    @property
    def tasks(self) -> Mapping[str, UploadTask]:
        return MappingProxyType(self._tasks)

    def enqueue(
        self,
        files: Iterable[StagedFile],
        identifier: str,
        *,
        description: str | None = None,
        replaces: Attachment | None = None,
    ) -> None:
        identifier = identifier.strip()
        if not identifier:
            raise ValueError(f"{self.station.identifier.label} is required")
        for file in files:
            self._jobs.put_nowait(_Job(file, identifier, description, replaces))
        self._ensure_worker()

    async def join(self) -> None:
        """Wait until every enqueued file has settled."""
        await self._jobs.join()

    def retry(self, task_id: str) -> bool:
        task = self._tasks.get(task_id)
        if task is None or task.status is not TaskStatus.ERROR:
            return False
        self._remove(task_id)
        self.enqueue(
            [task.file], task.identifier, description=task.description, replaces=task.replaces
        )
        return True

    def dismiss(self, task_id: str) -> bool:
        task = self._tasks.get(task_id)
        if task is None or task.status is not TaskStatus.ERROR:
            return False
        self._remove(task_id)
        return True

    async def close(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        # Jobs the worker never reached still count against join().
        while not self._jobs.empty():
            self._jobs.get_nowait()
            self._jobs.task_done()

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            job = await self._jobs.get()
            try:
                await self._upload(job)
            except Exception:
                logger.exception("Upload of %s stopped unexpectedly", job.file.name)
            finally:
                self._jobs.task_done()

    async def _upload(self, job: _Job) -> None:
        file = job.file
        task = UploadTask(
            id=new_task_id(file.name),
            file=file,
            identifier=job.identifier,
            description=job.description,
            replaces=job.replaces,
        )
        self._put(task)

        payload = UploadPayload(
            file=file,
            category=self.station.category,
            kind=resolve_kind(self.station, classify(file.name)),
            cam_number=job.identifier,
            description=job.description,
        )
        logger.info("Uploading %s to work order %s as %s", file.name, self.work_order_id, payload.kind)
        try:
            await self.client.create_attachment(self.work_order_id, payload)
        except (AttachmentApiError, OSError) as exc:
            message = getattr(exc, "message", None) or str(exc) or "Unable to upload file right now."
            self._put(replace(task, status=TaskStatus.ERROR, progress=0, error=message))
            self.notifier.notify("Upload failed", f"Failed to upload {file.name}: {message}", error=True)
            return

        self._put(replace(task, status=TaskStatus.COMPLETED, progress=100))
        asyncio.get_running_loop().call_later(self.retention_seconds, self._remove, task.id)

        verb = "reuploaded" if job.replaces else "uploaded"
        self.notifier.notify(
            f"File {verb} successfully",
            f"{file.name} has been {verb} with {self.station.identifier.short} number: {job.identifier}",
        )
        if self.list_view is not None:
            await self.list_view.refresh(notify_parent=True)

    def _put(self, task: UploadTask) -> None:
        self._tasks = {**self._tasks, task.id: task}
        self._changed()

    def _remove(self, task_id: str) -> None:
        if task_id not in self._tasks:
            return
        self._tasks = {k: v for k, v in self._tasks.items() if k != task_id}
        self._changed()

    def _changed(self) -> None:
        if self.listener is None:
            return
        try:
            self.listener(self.tasks)
        except Exception:
            logger.exception("Upload task listener failed")
