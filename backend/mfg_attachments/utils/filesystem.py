import mimetypes
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class StagedFile:
    """A file chosen by the operator, read from disk or held in memory."""

    name: str
    size: int
    path: Path | None = None
    content: bytes | None = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path | str) -> "StagedFile":
        path = Path(path)
        return cls(name=path.name, size=path.stat().st_size, path=path)

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> "StagedFile":
        return cls(name=name, size=len(content), content=content)

    @property
    def mime_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise FileNotFoundError(f"{self.name} has no content")
        return self.path.read_bytes()


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while i < len(units) - 1 and size >= 1024 ** (i + 1):
        i += 1
    value = round(size / 1024 ** i, 2)
    return f"{value:g} {units[i]}"
