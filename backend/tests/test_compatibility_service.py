import pytest
from pydantic import ValidationError as SchemaValidationError

from app.core.errors import ConflictError, NotFoundError
from app.models.compatibility import INITIAL_VERSION, VERSION_ROW_ID, CompatibilityVersion
from app.repositories.compatibility_repository import compatibility_repository
from app.schemas.compatibility import CompatibilityCreate, CompatibilityUpdate
from app.schemas.metal import MetalCreate, MetalUpdate
from app.services.compatibility_service import compatibility_service
from app.services.metal_service import metal_service


def create_payload(chemical_name, *pairs):
    return CompatibilityCreate(
        chemical_name=chemical_name,
        compatibilities=[{"metal": metal_id, "is_compatible": ok} for metal_id, ok in pairs],
    )


@pytest.fixture
def metals(make_metal):
    return {name: make_metal(name) for name in ("Steel", "Aluminum", "Copper")}


def test_version_starts_at_initial_value(db):
    assert compatibility_service.get_version(db) == INITIAL_VERSION


def test_every_successful_write_bumps_version_by_one(db, metals):
    steel = metals["Steel"]
    start = compatibility_service.get_version(db)

    entry = compatibility_service.create(db, create_payload("acetone", (steel.id, True)))
    assert compatibility_service.get_version(db) == start + 1

    compatibility_service.update(db, entry.id, CompatibilityUpdate(chemical_name="Acetone Pure"))
    assert compatibility_service.get_version(db) == start + 2

    compatibility_service.delete(db, entry.id)
    assert compatibility_service.get_version(db) == start + 3


def test_chemical_name_is_normalized(db, metals):
    entry = compatibility_service.create(db, create_payload("  sulfuric acid ", (metals["Steel"].id, False)))

    assert entry.chemical_name == "SULFURIC ACID"


def test_duplicate_chemical_in_any_case_conflicts_without_bumping(db, metals):
    compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))
    version = compatibility_service.get_version(db)

    with pytest.raises(ConflictError):
        compatibility_service.create(db, create_payload("aCeToNe", (metals["Copper"].id, True)))

    assert compatibility_service.get_version(db) == version
    assert len(compatibility_service.get_all(db)) == 1


def test_same_metal_twice_in_one_entry_conflicts(db, metals):
    steel = metals["Steel"]

    with pytest.raises(ConflictError):
        compatibility_service.create(db, create_payload("Ethanol", (steel.id, True), (steel.id, False)))

    assert compatibility_service.get_version(db) == INITIAL_VERSION


def test_unknown_metal_is_not_found(db, metals):
    with pytest.raises(NotFoundError):
        compatibility_service.create(db, create_payload("Ethanol", (metals["Steel"].id, True), (9999, True)))

    assert compatibility_service.get_all(db) == []


def test_pairs_keep_submitted_order_and_resolve_metals(db, metals):
    entry = compatibility_service.create(
        db,
        create_payload(
            "Brine",
            (metals["Copper"].id, True),
            (metals["Steel"].id, False),
            (metals["Aluminum"].id, False),
        ),
    )

    fetched = compatibility_service.get_by_id(db, entry.id)
    assert [(p.metal.name, p.is_compatible) for p in fetched.compatibilities] == [
        ("Copper", True),
        ("Steel", False),
        ("Aluminum", False),
    ]


def test_update_replaces_the_pair_list(db, metals):
    entry = compatibility_service.create(
        db, create_payload("Brine", (metals["Steel"].id, False), (metals["Copper"].id, True))
    )

    updated = compatibility_service.update(
        db,
        entry.id,
        CompatibilityUpdate(compatibilities=[
            {"metal": metals["Copper"].id, "is_compatible": False},
            {"metal": metals["Aluminum"].id, "is_compatible": True},
        ]),
    )

    assert [(p.metal.name, p.is_compatible) for p in updated.compatibilities] == [
        ("Copper", False),
        ("Aluminum", True),
    ]


def test_update_to_another_entrys_chemical_name_conflicts(db, metals):
    compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))
    other = compatibility_service.create(db, create_payload("Ethanol", (metals["Steel"].id, True)))
    version = compatibility_service.get_version(db)

    with pytest.raises(ConflictError):
        compatibility_service.update(db, other.id, CompatibilityUpdate(chemical_name="acetone"))

    assert compatibility_service.get_version(db) == version


def test_delete_then_lookup_is_not_found(db, metals):
    entry = compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))
    version = compatibility_service.get_version(db)

    compatibility_service.delete(db, entry.id)

    assert compatibility_service.get_version(db) == version + 1
    with pytest.raises(NotFoundError):
        compatibility_service.get_by_id(db, entry.id)


def test_delete_missing_entry_does_not_bump(db):
    with pytest.raises(NotFoundError):
        compatibility_service.delete(db, 12345)

    assert compatibility_service.get_version(db) == INITIAL_VERSION


def test_get_all_is_sorted_by_chemical_name(db, metals):
    for name in ("Xylene", "Acetone", "Methanol"):
        compatibility_service.create(db, create_payload(name, (metals["Steel"].id, True)))

    assert [e.chemical_name for e in compatibility_service.get_all(db)] == ["ACETONE", "METHANOL", "XYLENE"]


def test_get_all_with_version_returns_both(db, metals):
    compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))

    result = compatibility_service.get_all_with_version(db)

    assert result["version"] == INITIAL_VERSION + 1
    assert [e.chemical_name for e in result["compatibilities"]] == ["ACETONE"]


def test_matrix_view_marks_untested_combinations_as_none(db, metals):
    compatibility_service.create(
        db, create_payload("Acetone", (metals["Steel"].id, True), (metals["Copper"].id, False))
    )
    compatibility_service.create(db, create_payload("Brine", (metals["Aluminum"].id, False)))

    view = compatibility_service.get_matrix_view(db)

    assert view["chemicals"] == ["ACETONE", "BRINE"]
    assert view["metals"] == ["Aluminum", "Copper", "Steel"]
    assert view["matrix"] == [
        {"chemicalName": "ACETONE", "Aluminum": None, "Copper": False, "Steel": True},
        {"chemicalName": "BRINE", "Aluminum": False, "Copper": None, "Steel": None},
    ]


def test_metal_in_use_cannot_be_deleted(db, metals):
    compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))

    with pytest.raises(ConflictError):
        metal_service.delete(db, metals["Steel"].id)

    metal_service.delete(db, metals["Copper"].id)
    with pytest.raises(NotFoundError):
        metal_service.get_by_id(db, metals["Copper"].id)


def test_first_bump_without_seeded_row_lands_after_initial_version(db, metals):
    db.query(CompatibilityVersion).filter(CompatibilityVersion.id == VERSION_ROW_ID).delete()
    db.commit()
    assert compatibility_repository.get_version(db) == INITIAL_VERSION

    compatibility_service.create(db, create_payload("Acetone", (metals["Steel"].id, True)))

    assert compatibility_repository.get_version(db) == INITIAL_VERSION + 1


@pytest.mark.parametrize("name", ["chemicalName", " CHEMICALNAME "])
def test_matrix_label_is_not_a_metal_name(name):
    with pytest.raises(SchemaValidationError):
        MetalCreate(name=name)
    with pytest.raises(SchemaValidationError):
        MetalUpdate(name=name)
