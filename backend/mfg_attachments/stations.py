from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from mfg_attachments.config import settings


class FileCategory(str, Enum):
    DRILL = "drill"
    GERBER = "gerber"
    IMAGE = "image"
    JOB_CARD = "job_card"
    UNKNOWN = "unknown"


# Lookup order matters: the first table containing the extension wins.
FILE_TYPES: MappingProxyType = MappingProxyType({
    FileCategory.DRILL: (".drl", ".txt"),
    FileCategory.GERBER: (
        ".gbr", ".ger", ".pho", ".art", ".gbl", ".gtl", ".gbs",
        ".gts", ".gbo", ".gto", ".gml", ".gm1", ".gm2", ".gm3",
    ),
    FileCategory.IMAGE: (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".tif"),
    FileCategory.JOB_CARD: (".pdf", ".docx", ".doc"),
})

ALL_EXTENSIONS: tuple[str, ...] = tuple(ext for exts in FILE_TYPES.values() for ext in exts)

KIND_BY_FILE_CATEGORY: MappingProxyType = MappingProxyType({
    FileCategory.DRILL: "drill_file",
    FileCategory.GERBER: "gerber",
    FileCategory.IMAGE: "spec",
    FileCategory.JOB_CARD: "job_card",
    FileCategory.UNKNOWN: "spec",
})

# Single-purpose stations tag everything they receive with one kind.
STATION_KIND_OVERRIDES: MappingProxyType = MappingProxyType({
    "nc_drill": "drill_file",
    "phototools": "film",
})


@dataclass(frozen=True)
class IdentifierMeta:
    label: str
    placeholder: str
    short: str


@dataclass(frozen=True)
class StationConfig:
    category: str
    title: str
    accepted_extensions: tuple[str, ...]
    identifier: IdentifierMeta
    supported_hint: str = ""
    kind_override: str | None = None
    max_upload_bytes: int | None = None
    # Narrows the attachment list to these kinds; empty shows every kind filed under the category.
    display_kinds: tuple[str, ...] = ()

    @property
    def accept(self) -> str:
        return ",".join(self.accepted_extensions)

    @property
    def upload_limit(self) -> int:
        """Per-station limit, or the configured global limit when unset."""
        if self.max_upload_bytes is not None:
            return self.max_upload_bytes
        return settings.max_upload_bytes


CAM_NUMBER = IdentifierMeta(label="CAM Number", placeholder="Enter CAM number", short="CAM")
FILM_NUMBER = IdentifierMeta(label="Film Number", placeholder="Enter film number", short="Film")
NC_DRILL_NUMBER = IdentifierMeta(
    label="NC Drill Number", placeholder="Enter NC drill number", short="NC Drill"
)

INTAKE = StationConfig(
    category="intake",
    title="CAM File Upload",
    accepted_extensions=ALL_EXTENSIONS,
    identifier=CAM_NUMBER,
    supported_hint="Supported: Gerber files, BOM files, Panel drawings, Job cards (.pdf, .docx)",
)
NC_DRILL = StationConfig(
    category="nc_drill",
    title="NC Drill File Upload",
    accepted_extensions=FILE_TYPES[FileCategory.DRILL],
    identifier=NC_DRILL_NUMBER,
    supported_hint="Supported: NC Drill files (.drl, .txt)",
    kind_override=STATION_KIND_OVERRIDES["nc_drill"],
)
PHOTOTOOLS = StationConfig(
    category="phototools",
    title="Film File Upload",
    accepted_extensions=FILE_TYPES[FileCategory.IMAGE],
    identifier=FILM_NUMBER,
    supported_hint="Supported: Film files (.png, .jpg, .jpeg, .gif, .bmp, .tiff, .tif)",
    kind_override=STATION_KIND_OVERRIDES["phototools"],
)
INSPECTION = StationConfig(
    category="inspection",
    title="Inspection File Upload",
    accepted_extensions=FILE_TYPES[FileCategory.IMAGE] + FILE_TYPES[FileCategory.JOB_CARD],
    identifier=CAM_NUMBER,
    supported_hint="Supported: Inspection images and reports (.png, .jpg, .pdf)",
)

STATIONS: MappingProxyType = MappingProxyType({
    station.category: station for station in (INTAKE, NC_DRILL, PHOTOTOOLS, INSPECTION)
})


def get_station(category: str) -> StationConfig:
    """Return the configured station, falling back to CAM intake labels for unknown categories."""
    station = STATIONS.get(category)
    if station is not None:
        return station
    return StationConfig(
        category=category,
        title=INTAKE.title,
        accepted_extensions=ALL_EXTENSIONS,
        identifier=CAM_NUMBER,
        supported_hint=INTAKE.supported_hint,
    )
