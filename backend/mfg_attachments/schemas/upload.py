from dataclasses import dataclass
from enum import Enum

from mfg_attachments.schemas.attachment import Attachment
from mfg_attachments.utils.filesystem import StagedFile


class TaskStatus(str, Enum):
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class PendingUploadItem:
    file: StagedFile
    is_replacement_for: Attachment | None = None


@dataclass(frozen=True)
class Rejection:
    file: StagedFile
    reason: str

    def __str__(self) -> str:
        return f"{self.file.name}: {self.reason}"


@dataclass(frozen=True)
class ValidationResult:
    accepted: tuple[StagedFile, ...]
    rejected: tuple[Rejection, ...]

    @property
    def message(self) -> str:
        return "; ".join(str(r) for r in self.rejected)


@dataclass(frozen=True)
class MetadataDecision:
    identifier: str
    items: tuple[PendingUploadItem, ...]
    replacement_target: Attachment | None = None
    description: str | None = None

    @property
    def files(self) -> list[StagedFile]:
        return [item.file for item in self.items]


@dataclass(frozen=True)
class UploadPayload:
    """Multipart fields sent with a new attachment."""

    file: StagedFile
    category: str
    kind: str
    cam_number: str
    description: str | None = None

    def form_fields(self) -> dict[str, str]:
        fields = {
            "category": self.category,
            "kind": self.kind,
            "camNumber": self.cam_number,
        }
        if self.description:
            fields["description"] = self.description
        return fields


@dataclass(frozen=True)
class UploadTask:
    id: str
    file: StagedFile
    identifier: str
    status: TaskStatus = TaskStatus.UPLOADING
    progress: int = 0
    error: str | None = None
    description: str | None = None
    replaces: Attachment | None = None
