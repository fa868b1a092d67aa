import functools
import logging
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func, update
from sqlalchemy.orm import Session
from app.models.compatibility import (
    INITIAL_VERSION,
    VERSION_ROW_ID,
    CompatibilityEntry,
    CompatibilityPair,
    CompatibilityVersion,
)

logger = logging.getLogger(__name__)

# (metal_id, is_compatible)
PairData = Tuple[int, bool]


def bumps_version(method):
    """
    Run a mutating repository method, then bump the global version counter.

    The mutation and the increment are committed together, so the counter
    moves by exactly one for every successful write and not at all for a
    failed one.
    """
    @functools.wraps(method)
    def wrapper(self, db: Session, *args, **kwargs):
        try:
            result = method(self, db, *args, **kwargs)
            self.bump_version(db)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return result
    return wrapper


class CompatibilityRepository:
    @bumps_version
    def create(self, db: Session, chemical_name: str, pairs: Iterable[PairData]) -> CompatibilityEntry:
        entry = CompatibilityEntry(chemical_name=chemical_name)
        entry.compatibilities = [
            CompatibilityPair(metal_id=metal_id, is_compatible=is_compatible)
            for metal_id, is_compatible in pairs
        ]
        db.add(entry)
        db.flush()
        return entry

    @bumps_version
    def update(
        self,
        db: Session,
        entry: CompatibilityEntry,
        chemical_name: Optional[str] = None,
        pairs: Optional[Iterable[PairData]] = None,
    ) -> CompatibilityEntry:
        if chemical_name is not None:
            entry.chemical_name = chemical_name
        if pairs is not None:
            # Old pairs must be gone before the new ones are inserted or the
            # (entry, metal) unique constraint trips on metals kept in the list
            entry.compatibilities.clear()
            db.flush()
            entry.compatibilities = [
                CompatibilityPair(metal_id=metal_id, is_compatible=is_compatible)
                for metal_id, is_compatible in pairs
            ]
        db.flush()
        return entry

    @bumps_version
    def delete(self, db: Session, entry: CompatibilityEntry) -> bool:
        db.delete(entry)
        db.flush()
        return True

    def get_by_id(self, db: Session, entry_id: int) -> Optional[CompatibilityEntry]:
        return db.query(CompatibilityEntry).filter(CompatibilityEntry.id == entry_id).first()

    def get_all(self, db: Session) -> List[CompatibilityEntry]:
        return (
            db.query(CompatibilityEntry)
            .order_by(CompatibilityEntry.chemical_name.asc(), CompatibilityEntry.id.asc())
            .all()
        )

    def find_by_chemical(self, db: Session, chemical_name: str) -> Optional[CompatibilityEntry]:
        return (
            db.query(CompatibilityEntry)
            .filter(CompatibilityEntry.chemical_name == chemical_name.strip().upper())
            .first()
        )

    def get_version(self, db: Session) -> int:
        version = (
            db.query(CompatibilityVersion.version)
            .filter(CompatibilityVersion.id == VERSION_ROW_ID)
            .scalar()
        )
        return version if version is not None else INITIAL_VERSION

    def bump_version(self, db: Session) -> None:
        """Atomic increment of the counter row; never read-modify-write."""
        result = db.execute(
            update(CompatibilityVersion)
            .where(CompatibilityVersion.id == VERSION_ROW_ID)
            .values(version=CompatibilityVersion.version + 1, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Row was never seeded; the counter reads INITIAL_VERSION until
            # now, so the first bump lands on INITIAL_VERSION + 1
            db.add(CompatibilityVersion(id=VERSION_ROW_ID, version=INITIAL_VERSION + 1))
            db.flush()

    def ensure_version_row(self, db: Session) -> None:
        exists = db.query(CompatibilityVersion.id).filter(CompatibilityVersion.id == VERSION_ROW_ID).first()
        if exists is None:
            db.add(CompatibilityVersion(id=VERSION_ROW_ID, version=INITIAL_VERSION))
            db.commit()
            logger.info("Seeded compatibility version counter at %d", INITIAL_VERSION)


compatibility_repository = CompatibilityRepository()
