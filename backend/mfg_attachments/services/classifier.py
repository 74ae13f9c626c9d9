from mfg_attachments.stations import (
    FILE_TYPES,
    KIND_BY_FILE_CATEGORY,
    FileCategory,
    StationConfig,
    get_station,
)


def file_extension(filename: str) -> str:
    dot = filename.rfind(".")
    if dot == -1:
        return ""
    return filename[dot:].lower()


def classify(filename: str) -> FileCategory:
    ext = file_extension(filename)
    if not ext:
        return FileCategory.UNKNOWN
    for category, extensions in FILE_TYPES.items():
        if ext in extensions:
            return category
    return FileCategory.UNKNOWN


def resolve_kind(station: StationConfig | str, file_category: FileCategory) -> str:
    """Kind tag persisted with an upload.

    Single-purpose stations override whatever the extension suggests; every
    other station, including ones that are not configured, defers to the
    file category.
    """
    if isinstance(station, str):
        station = get_station(station)
    if station.kind_override is not None:
        return station.kind_override
    return KIND_BY_FILE_CATEGORY[file_category]
