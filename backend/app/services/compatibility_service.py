import logging
from typing import Any, Dict, List, Sequence
from sqlalchemy.orm import Session
from app.core.errors import ConflictError, NotFoundError
from app.models.compatibility import CompatibilityEntry
from app.repositories.compatibility_repository import PairData, compatibility_repository
from app.repositories.metal_repository import metal_repository
from app.schemas.compatibility import CompatibilityCreate, CompatibilityUpdate, MetalCompatibilityIn
from app.schemas.metal import MATRIX_LABEL_KEY

logger = logging.getLogger(__name__)

COMPATIBILITY_NOT_FOUND_MESSAGE = "Compatibility entry not found"


class CompatibilityService:
    def _resolve_pairs(self, db: Session, compatibilities: Sequence[MetalCompatibilityIn]) -> List[PairData]:
        """
        Check a submitted compatibility list and turn it into (metal_id, is_compatible) pairs.

        A metal may appear only once per chemical, and every referenced metal
        must exist.
        """
        metal_ids = [item.metal for item in compatibilities]
        if len(set(metal_ids)) != len(metal_ids):
            raise ConflictError("Each metal can only appear once per chemical")

        found = {metal.id for metal in metal_repository.find_by_ids(db, metal_ids)}
        missing = sorted(set(metal_ids) - found)
        if missing:
            raise NotFoundError(f"Metal not found: {', '.join(str(metal_id) for metal_id in missing)}")

        return [(item.metal, item.is_compatible) for item in compatibilities]

    def create(self, db: Session, data: CompatibilityCreate) -> CompatibilityEntry:
        if compatibility_repository.find_by_chemical(db, data.chemical_name):
            raise ConflictError("Compatibility for this chemical already exists")

        pairs = self._resolve_pairs(db, data.compatibilities)
        entry = compatibility_repository.create(db, data.chemical_name, pairs)
        logger.info(f"Compatibility created: {entry.chemical_name} with {len(pairs)} metals")
        return entry

    def get_by_id(self, db: Session, entry_id: int) -> CompatibilityEntry:
        entry = compatibility_repository.get_by_id(db, entry_id)
        if entry is None:
            raise NotFoundError(COMPATIBILITY_NOT_FOUND_MESSAGE)
        return entry

    def get_all(self, db: Session) -> List[CompatibilityEntry]:
        return compatibility_repository.get_all(db)

    def update(self, db: Session, entry_id: int, data: CompatibilityUpdate) -> CompatibilityEntry:
        entry = self.get_by_id(db, entry_id)

        if data.chemical_name is not None and data.chemical_name != entry.chemical_name:
            existing = compatibility_repository.find_by_chemical(db, data.chemical_name)
            if existing and existing.id != entry.id:
                raise ConflictError("Compatibility for this chemical already exists")

        pairs = None
        if data.compatibilities is not None:
            pairs = self._resolve_pairs(db, data.compatibilities)

        entry = compatibility_repository.update(db, entry, chemical_name=data.chemical_name, pairs=pairs)
        logger.info(f"Compatibility updated: {entry.chemical_name}")
        return entry

    def delete(self, db: Session, entry_id: int) -> None:
        entry = self.get_by_id(db, entry_id)
        chemical_name = entry.chemical_name
        compatibility_repository.delete(db, entry)
        logger.info(f"Compatibility deleted: {chemical_name}")

    def get_all_with_version(self, db: Session) -> Dict[str, Any]:
        return {
            "compatibilities": self.get_all(db),
            "version": compatibility_repository.get_version(db),
        }

    def get_version(self, db: Session) -> int:
        return compatibility_repository.get_version(db)

    def get_matrix_view(self, db: Session) -> Dict[str, Any]:
        """
        Pivot all entries into a chemical x metal grid.

        Metal columns are every metal that appears in at least one entry,
        sorted by name. Cells are True/False, or None for combinations that
        were never recorded.
        """
        entries = self.get_all(db)
        metals = sorted({pair.metal.name for entry in entries for pair in entry.compatibilities})

        matrix = []
        for entry in entries:
            verdicts = {pair.metal.name: pair.is_compatible for pair in entry.compatibilities}
            row: Dict[str, Any] = {MATRIX_LABEL_KEY: entry.chemical_name}
            for metal_name in metals:
                row[metal_name] = verdicts.get(metal_name)
            matrix.append(row)

        return {
            "chemicals": [entry.chemical_name for entry in entries],
            "metals": metals,
            "matrix": matrix,
        }


compatibility_service = CompatibilityService()
