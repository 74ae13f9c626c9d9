from collections.abc import Iterable

from mfg_attachments.config import MIB
from mfg_attachments.schemas.upload import Rejection, ValidationResult
from mfg_attachments.services.classifier import classify
from mfg_attachments.stations import FileCategory, StationConfig
from mfg_attachments.utils.filesystem import StagedFile

UNSUPPORTED_TYPE = "Unsupported file type"


def too_large_reason(max_bytes: int) -> str:
    return f"File too large (max {max_bytes // MIB}MB)"


def validate(files: Iterable[StagedFile], station: StationConfig) -> ValidationResult:
    """Split a batch into files that may be uploaded and files that may not.

    Each file is judged on its own; a bad file never holds back the rest.
    """
    accepted: list[StagedFile] = []
    rejected: list[Rejection] = []
    for file in files:
        if classify(file.name) is FileCategory.UNKNOWN:
            rejected.append(Rejection(file, UNSUPPORTED_TYPE))
        elif file.size > station.upload_limit:
            rejected.append(Rejection(file, too_large_reason(station.upload_limit)))
        else:
            accepted.append(file)
    return ValidationResult(accepted=tuple(accepted), rejected=tuple(rejected))
