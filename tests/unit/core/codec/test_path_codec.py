from __future__ import annotations

"""
Unit tests for the Hierarchical Path Codec.

Verifies:
1. Encoding of folder whitespace and verbatim leaf handling.
2. Decoding back to structured segments.
3. Display-name extraction heuristics.
4. Rejection of malformed input and the character compliance rule.
"""

import pytest

from geopath.core.codec.path_codec import (
    decode,
    decode_to_storage_path,
    encode,
    encode_storage_path,
    extract_folder_prefix,
    extract_leaf_display_name,
    is_compliant,
    parse_identifier,
)
from geopath.domain.errors import GeoPathError, MalformedIdentifierError
from geopath.domain.path_models import StructuredPath

NCD_SEGMENTS = ["PNG", "NATIONAL CAPITAL DISTRICT", "MORESBY NORTH-EAST", "130168379_Soare_Nuana_F.jpg"]
NCD_IDENTIFIER = "PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST:130168379_Soare_Nuana_F.jpg"


# -----------------------------------------------------------------------------
# ENCODE / DECODE
# -----------------------------------------------------------------------------

def test_encode_replaces_folder_spaces() -> None:
    """Folder spaces become underscores; the leaf is untouched."""
    assert encode(NCD_SEGMENTS) == NCD_IDENTIFIER


def test_decode_restores_original_segments() -> None:
    decoded = decode(NCD_IDENTIFIER)
    assert list(decoded.segments) == NCD_SEGMENTS
    assert decoded.leaf == "130168379_Soare_Nuana_F.jpg"
    assert decoded.folders == ("PNG", "NATIONAL CAPITAL DISTRICT", "MORESBY NORTH-EAST")


def test_encode_collapses_whitespace_runs() -> None:
    assert encode(["A  B\tC", "file name.jpg"]) == "A_B_C:file name.jpg"


def test_encode_accepts_structured_path() -> None:
    assert encode(StructuredPath.of("Region One", "x.jpg")) == "Region_One:x.jpg"


def test_single_segment_is_leaf_only() -> None:
    assert encode(["only_leaf.jpg"]) == "only_leaf.jpg"
    assert decode("only_leaf.jpg").segments == ("only_leaf.jpg",)


def test_round_trip_for_space_only_folders() -> None:
    segments = ["ABG", "CENTRAL REGION", "KIETA", "img 01.jpg"]
    assert list(decode(encode(segments)).segments) == segments


def test_underscore_in_folder_decodes_as_space() -> None:
    """Folder underscores are not escaped, so they read back as spaces."""
    assert decode(encode(["A_B", "f.jpg"])).segments == ("A B", "f.jpg")


def test_storage_path_helpers() -> None:
    assert encode_storage_path("PNG/NATIONAL CAPITAL DISTRICT/f.jpg") == "PNG:NATIONAL_CAPITAL_DISTRICT:f.jpg"
    assert decode_to_storage_path("PNG:NATIONAL_CAPITAL_DISTRICT:f.jpg") == "PNG/NATIONAL CAPITAL DISTRICT/f.jpg"
    assert decode_to_storage_path("   ") == ""


# -----------------------------------------------------------------------------
# MALFORMED INPUT
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("segments", [[], ["A", "", "f.jpg"], ["A", "   "]])
def test_encode_rejects_empty_segments(segments) -> None:
    with pytest.raises(MalformedIdentifierError):
        encode(segments)


def test_encode_rejects_plain_string() -> None:
    with pytest.raises(MalformedIdentifierError):
        encode("A/B/f.jpg")


@pytest.mark.parametrize("identifier", ["", "   ", "A::f.jpg", ":f.jpg", "A:B:"])
def test_decode_rejects_malformed_identifiers(identifier: str) -> None:
    with pytest.raises(MalformedIdentifierError) as exc_info:
        decode(identifier)
    assert isinstance(exc_info.value, GeoPathError)
    assert isinstance(exc_info.value, ValueError)


# -----------------------------------------------------------------------------
# DISPLAY HELPERS
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("identifier, expected", [
    ("130168379_Soare_Nuana_F.jpg", "Soare Nuana F"),
    ("Soare_Nuana.jpg", "Soare Nuana"),
    ("12345_Kila.jpg", "12345 Kila"),
    (NCD_IDENTIFIER, "Soare Nuana F"),
    ("PNG:CENTRAL:noextension", "noextension"),
])
def test_extract_leaf_display_name(identifier: str, expected: str) -> None:
    assert extract_leaf_display_name(identifier) == expected


@pytest.mark.parametrize("identifier", ["", "   ", "PNG:.jpg"])
def test_extract_leaf_display_name_falls_back_to_unknown(identifier: str) -> None:
    assert extract_leaf_display_name(identifier) == "Unknown"


def test_extract_folder_prefix() -> None:
    assert extract_folder_prefix(NCD_IDENTIFIER) == "PNG/NATIONAL CAPITAL DISTRICT/MORESBY NORTH-EAST"
    assert extract_folder_prefix("leaf.jpg") == ""
    assert extract_folder_prefix("") == ""


def test_parse_identifier_keeps_segments_in_lock_step() -> None:
    parsed = parse_identifier(NCD_IDENTIFIER)
    assert parsed.folders == ("PNG", "NATIONAL_CAPITAL_DISTRICT", "MORESBY_NORTH-EAST")
    assert parsed.display_folders == ("PNG", "NATIONAL CAPITAL DISTRICT", "MORESBY NORTH-EAST")
    assert parsed.filename == "130168379_Soare_Nuana_F.jpg"
    assert parsed.full_path == "PNG/NATIONAL CAPITAL DISTRICT/MORESBY NORTH-EAST/130168379_Soare_Nuana_F.jpg"


def test_parse_identifier_blank_is_empty() -> None:
    parsed = parse_identifier("")
    assert parsed.folders == ()
    assert parsed.filename == ""


@pytest.mark.parametrize("identifier, expected", [
    (NCD_IDENTIFIER, True),
    ("A:B:100%_done.jpg", True),
    ("A:B C:f.jpg", False),
    ("A/B:f.jpg", False),
    ("", False),
])
def test_is_compliant(identifier: str, expected: bool) -> None:
    assert is_compliant(identifier) is expected
