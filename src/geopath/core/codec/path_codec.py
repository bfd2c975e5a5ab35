from __future__ import annotations

"""
Hierarchical Path Codec.

Bidirectional, stateless transform between structured storage paths
(REGION/PROVINCE/DISTRICT/file.jpg) and the flat identifiers accepted by the
face recognition API (REGION:PROVINCE:DISTRICT:file.jpg).

Folder segments have whitespace runs replaced with '_'; the leaf segment is
kept verbatim. Existing underscores in folder names are NOT escaped, so a
folder literally named 'A_B' decodes as 'A B'. This lossy behaviour matches
identifiers already stored by the recognition service and must not change.
"""

import re
from typing import Iterable, List, Sequence, Union

from geopath.domain.constants import (
    IDENTIFIER_PATTERN,
    SEGMENT_SEPARATOR,
    SPACE_SUBSTITUTE,
    STORAGE_SEPARATOR,
    UNKNOWN_NAME,
)
from geopath.domain.errors import MalformedIdentifierError
from geopath.domain.path_models import ParsedIdentifier, StructuredPath

_WHITESPACE_RUN = re.compile(r"\s+")
_FILE_EXTENSION = re.compile(r"\.[^/.]+$")
_RECORD_ID = re.compile(r"[0-9]+")

PathLike = Union[StructuredPath, Sequence[str]]

# -----------------------------------------------------------------------------
# PUBLIC API: ENCODE / DECODE
# -----------------------------------------------------------------------------

def encode(path: PathLike) -> str:
    """
    Encode a structured path into a flat identifier.

    Args:
        path: StructuredPath or ordered segments, leaf name last.

    Returns:
        str: Colon-joined identifier.

    Raises:
        MalformedIdentifierError: If the path is empty or has an empty segment.
    """
    segments = _coerce_segments(path)
    folders = [_encode_folder(seg) for seg in segments[:-1]]
    return SEGMENT_SEPARATOR.join(folders + [segments[-1]])


def decode(identifier: str) -> StructuredPath:
    """
    Decode a flat identifier into structured path segments.

    Every segment except the last has '_' read back as a space; the leaf
    is returned verbatim.

    Raises:
        MalformedIdentifierError: If the identifier is blank or contains
            an empty segment.
    """
    parts = _split_identifier(identifier)
    folders = [_decode_folder(p) for p in parts[:-1]]
    return StructuredPath(tuple(folders + [parts[-1]]))


def encode_storage_path(storage_path: str) -> str:
    """
    Encode a slash-separated storage path.

    Example:
        'PNG/NATIONAL CAPITAL DISTRICT/f.jpg' -> 'PNG:NATIONAL_CAPITAL_DISTRICT:f.jpg'
    """
    return encode(storage_path.split(STORAGE_SEPARATOR))


def decode_to_storage_path(identifier: str) -> str:
    """Decode an identifier into a slash path; blank input yields ''."""
    if not identifier or not identifier.strip():
        return ""
    return decode(identifier).as_storage_path()


# -----------------------------------------------------------------------------
# PUBLIC API: DISPLAY HELPERS
# -----------------------------------------------------------------------------

def extract_leaf_display_name(identifier: str) -> str:
    """
    Derive a human-readable label from the leaf segment.

    '130168379_Soare_Nuana_F.jpg' -> 'Soare Nuana F' (numeric record id
    dropped when at least three tokens are present); 'Soare_Nuana.jpg' ->
    'Soare Nuana'. Never raises; unusable input yields 'Unknown'.
    """
    if not identifier or not identifier.strip():
        return UNKNOWN_NAME

    leaf = identifier.split(SEGMENT_SEPARATOR)[-1]
    stem = _FILE_EXTENSION.sub("", leaf)
    tokens = stem.split(SPACE_SUBSTITUTE)

    if len(tokens) >= 3 and _RECORD_ID.fullmatch(tokens[0]):
        tokens = tokens[1:]

    name = " ".join(tokens).strip()
    return name or UNKNOWN_NAME


def extract_folder_prefix(identifier: str) -> str:
    """Return the decoded folder segments joined with '/', or '' when blank."""
    if not identifier or not identifier.strip():
        return ""
    parts = identifier.split(SEGMENT_SEPARATOR)[:-1]
    return STORAGE_SEPARATOR.join(_decode_folder(p) for p in parts)


def parse_identifier(identifier: str) -> ParsedIdentifier:
    """
    Split an identifier into lock-step encoded and display folder segments.

    Blank input yields an empty ParsedIdentifier.

    Raises:
        MalformedIdentifierError: If a segment is empty.
    """
    if not identifier or not identifier.strip():
        return ParsedIdentifier()

    parts = _split_identifier(identifier)
    folders = tuple(parts[:-1])
    return ParsedIdentifier(
        folders=folders,
        display_folders=tuple(_decode_folder(f) for f in folders),
        filename=parts[-1],
        full_path=decode(identifier).as_storage_path(),
    )


def is_compliant(identifier: str) -> bool:
    """Check an identifier against the recognition API character rule."""
    return bool(identifier) and IDENTIFIER_PATTERN.match(identifier) is not None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _encode_folder(segment: str) -> str:
    return _WHITESPACE_RUN.sub(SPACE_SUBSTITUTE, segment)


def _decode_folder(segment: str) -> str:
    return segment.replace(SPACE_SUBSTITUTE, " ")


def _coerce_segments(path: PathLike) -> List[str]:
    """Validate and normalize encoder input into a list of segments."""
    if isinstance(path, StructuredPath):
        segments: Iterable[str] = path.segments
    elif isinstance(path, str):
        raise MalformedIdentifierError(
            "Expected path segments, received a plain string; use encode_storage_path().",
            identifier=path,
        )
    else:
        segments = path

    out = list(segments)
    if not out:
        raise MalformedIdentifierError("Cannot encode an empty path.", identifier=path)
    for seg in out:
        if not isinstance(seg, str) or not seg.strip():
            raise MalformedIdentifierError(f"Empty path segment in {out!r}.", identifier=path)
    return out


def _split_identifier(identifier: str) -> List[str]:
    """Split an identifier and reject blank input or empty segments."""
    if not isinstance(identifier, str) or not identifier.strip():
        raise MalformedIdentifierError("Blank identifier.", identifier=identifier)

    parts = identifier.split(SEGMENT_SEPARATOR)
    if any(not p.strip() for p in parts):
        raise MalformedIdentifierError(
            f"Identifier has an empty segment: {identifier!r}", identifier=identifier
        )
    return parts
