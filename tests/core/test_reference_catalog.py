from __future__ import annotations

import pytest

from concours.core import ReferenceCatalog
from concours.errors import DuplicateCodeError, ListItemNotFoundError, PositionNotFoundError
from concours.schemas import ListItem, Position
from concours.store import InMemoryStore


def build_catalog() -> ReferenceCatalog:
    catalog = ReferenceCatalog(InMemoryStore())
    catalog.add_position(Position(code="101", title="Ingénieur principal", open_positions=3))
    catalog.add_position(Position(code="102", title="Technicien", open_positions=1))
    catalog.add_item("degrees", ListItem(value="ING", label="Diplôme d'ingénieur"))
    catalog.add_item("bac_specialties", ListItem(value="MATH", label="Mathématiques"))
    return catalog


def test_duplicate_position_code_is_rejected():
    catalog = build_catalog()

    with pytest.raises(DuplicateCodeError):
        catalog.add_position(Position(code="101", title="Autre"))
    assert catalog.get_position("101").title == "Ingénieur principal"


def test_update_position_can_rename_but_not_collide():
    catalog = build_catalog()

    catalog.update_position("102", Position(code="103", title="Technicien supérieur", open_positions=2))

    assert catalog.resolve_position("102") is None
    assert catalog.get_position("103").open_positions == 2
    with pytest.raises(DuplicateCodeError):
        catalog.update_position("103", Position(code="101", title="Collision"))
    with pytest.raises(PositionNotFoundError):
        catalog.update_position("999", Position(code="999", title="Missing"))


def test_position_capacity_must_be_positive():
    with pytest.raises(ValueError):
        Position(code="104", title="Zero", open_positions=0)


def test_unpublished_position_is_hidden_but_still_titled():
    catalog = build_catalog()

    catalog.set_position_published("101", False)

    assert catalog.resolve_position("101") is None
    assert catalog.resolve_position("101", published_only=False) is not None
    assert [p.code for p in catalog.positions(published_only=True)] == ["102"]
    assert catalog.position_title("101") == "Ingénieur principal"


def test_removed_position_falls_back_to_raw_code():
    catalog = build_catalog()

    catalog.remove_position("101")

    assert catalog.position_title("101") == "101"
    with pytest.raises(PositionNotFoundError):
        catalog.remove_position("101")


def test_list_items_are_unique_per_catalog_only():
    catalog = build_catalog()

    catalog.add_item("bac_specialties", ListItem(value="ING", label="Same code, other catalog"))
    with pytest.raises(DuplicateCodeError):
        catalog.add_item("degrees", ListItem(value="ING", label="Dup"))


def test_removed_item_label_falls_back_to_value():
    catalog = build_catalog()

    catalog.remove_item("degrees", "ING")

    assert catalog.resolve_label("degrees", "ING") == "ING"
    assert catalog.resolve_label("bac_specialties", "MATH") == "Mathématiques"
    with pytest.raises(ListItemNotFoundError):
        catalog.remove_item("degrees", "ING")


def test_unpublished_item_keeps_label():
    catalog = build_catalog()

    catalog.set_item_published("degrees", "ING", False)

    assert catalog.items("degrees", published_only=True) == []
    assert catalog.resolve_label("degrees", "ING") == "Diplôme d'ingénieur"


def test_update_item_renames_value():
    catalog = build_catalog()
    catalog.add_item("degrees", ListItem(value="LIC", label="Licence"))

    catalog.update_item("degrees", "LIC", ListItem(value="LIC-A", label="Licence appliquée"))

    assert [item.value for item in catalog.items("degrees")] == ["ING", "LIC-A"]
    with pytest.raises(DuplicateCodeError):
        catalog.update_item("degrees", "LIC-A", ListItem(value="ING", label="Collision"))


def test_unknown_catalog_is_rejected():
    catalog = build_catalog()

    with pytest.raises(ValueError):
        catalog.items("governorates")  # type: ignore[arg-type]


def test_update_keeps_unpublished_flag_unless_given():
    catalog = build_catalog()
    catalog.set_item_published("degrees", "ING", False)
    catalog.set_position_published("101", False)

    catalog.update_item("degrees", "ING", ListItem(value="ING", label="Ingénieur d'État"))
    catalog.update_position("101", Position(code="101", title="Ingénieur en chef", open_positions=3))

    assert catalog.items("degrees", published_only=True) == []
    assert catalog.resolve_label("degrees", "ING") == "Ingénieur d'État"
    assert catalog.resolve_position("101") is None

    catalog.update_item("degrees", "ING", ListItem(value="ING", label="Ingénieur", published=True))
    assert [item.value for item in catalog.items("degrees", published_only=True)] == ["ING"]
