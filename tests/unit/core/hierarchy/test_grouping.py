from __future__ import annotations

"""
Unit tests for the Folder Grouping Facade.

Verifies:
1. Flattened lookup of items and subfolders per encoded folder key.
2. Record shapes accepted by the default identifier extractor.
3. Breadcrumb and parent navigation helpers.
"""

from dataclasses import dataclass
from typing import List

from geopath.core.hierarchy.grouping import (
    breadcrumbs,
    default_identifier,
    group_by_folder,
    parent_key,
)
from geopath.domain.path_models import Breadcrumb


@dataclass
class _Face:
    external_id: str


def test_group_by_folder_index(sample_identifiers: List[str]) -> None:
    index = group_by_folder(sample_identifiers)

    assert index[""].subfolders == ["ABG", "PNG"]
    assert index["PNG"].subfolders == ["PNG:CENTRAL", "PNG:NATIONAL_CAPITAL_DISTRICT"]

    ne = index["PNG:NATIONAL_CAPITAL_DISTRICT:MORESBY_NORTH-EAST"]
    assert ne.display_path == "PNG/NATIONAL CAPITAL DISTRICT/MORESBY NORTH-EAST"
    assert sorted(i.display_name for i in ne.items) == ["Kila Morea M", "Soare Nuana F"]
    assert ne.subfolders == []


def test_root_entry_always_present() -> None:
    index = group_by_folder([])
    assert list(index) == [""]
    assert index[""].items == []
    assert index[""].subfolders == []


def test_records_are_preserved_with_duplicates() -> None:
    records = [
        {"ExternalImageId": "A:f.jpg", "FaceId": "1"},
        {"ExternalImageId": "A:f.jpg", "FaceId": "2"},
        {"FaceId": "no-id"},
    ]
    index = group_by_folder(records)

    items = index["A"].items
    assert [i.record["FaceId"] for i in items] == ["1", "2"]
    assert items[0].storage_path == "A/f.jpg"


def test_custom_key_function() -> None:
    index = group_by_folder([("x", "B:c.jpg")], key=lambda r: r[1])
    assert index["B"].items[0].record == ("x", "B:c.jpg")


def test_default_identifier_shapes() -> None:
    assert default_identifier("A:f.jpg") == "A:f.jpg"
    assert default_identifier({"ExternalImageId": "A:f.jpg"}) == "A:f.jpg"
    assert default_identifier(_Face("B:g.jpg")) == "B:g.jpg"
    assert default_identifier({"ExternalImageId": 5}) is None
    assert default_identifier(object()) is None


def test_parent_key() -> None:
    assert parent_key("PNG:CENTRAL:ABAU") == "PNG:CENTRAL"
    assert parent_key("PNG") == ""


def test_breadcrumbs_trail() -> None:
    assert breadcrumbs("PNG:CENTRAL_PROVINCE") == [
        Breadcrumb(name="PNG", key="PNG"),
        Breadcrumb(name="CENTRAL PROVINCE", key="PNG:CENTRAL_PROVINCE"),
    ]
    assert breadcrumbs("") == []
