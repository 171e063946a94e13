"""
Field lookup across the images of a parsed stream record.
"""

from typing import Any, Mapping, Sequence, Union

from dynamo_es_stream.errors import FieldNotFoundError
from dynamo_es_stream.models import ParsedRecord

_MISSING = object()


def get_path(container: Any, path: str) -> Any:
    """
    Look up a dot-separated path in nested dicts and lists.

    Numeric segments index into lists. Returns the module sentinel when any
    segment is absent, so a stored ``None`` is distinguishable from a miss.
    """
    current = container
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            position = int(segment)
            if position >= len(current):
                return _MISSING
            current = current[position]
        else:
            return _MISSING
    return current


def get_field(parsed_record: ParsedRecord, path: str) -> Any:
    """
    Resolve a field from Keys, then NewImage, then OldImage.

    The first image where the path is defined wins.

    Raises:
        FieldNotFoundError: If no image defines the path
    """
    for image in parsed_record.images():
        value = get_path(image, path)
        if value is not _MISSING:
            return value
    raise FieldNotFoundError(parsed_record.to_dict(), path)


def assemble_field(
    parsed_record: ParsedRecord,
    paths: Union[str, Sequence[str]],
    separator: str,
) -> Any:
    """
    Resolve one path, or several paths joined with ``separator``.

    A single path returns the raw value; a list of paths always yields a
    string.
    """
    if isinstance(paths, str):
        return get_field(parsed_record, paths)
    return separator.join(
        _stringify(get_field(parsed_record, path)) for path in paths
    )


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def pick_fields(
    image: Mapping[str, Any], paths: Union[str, Sequence[str]]
) -> dict[str, Any]:
    """Copy only the listed (possibly nested) paths out of an image."""
    picked: dict[str, Any] = {}
    for path in [paths] if isinstance(paths, str) else paths:
        value = get_path(image, path)
        if value is _MISSING:
            continue
        *parents, leaf = path.split(".")
        target = picked
        for parent in parents:
            target = target.setdefault(parent, {})
        target[leaf] = value
    return picked
