from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.compatibility import CompatibilityPair
from app.models.metal import Metal


class MetalRepository:
    def create(self, db: Session, name: str) -> Metal:
        metal = Metal(name=name)
        db.add(metal)
        db.commit()
        db.refresh(metal)
        return metal

    def find_by_id(self, db: Session, metal_id: int) -> Optional[Metal]:
        return db.query(Metal).filter(Metal.id == metal_id).first()

    def find_by_name(self, db: Session, name: str) -> Optional[Metal]:
        return db.query(Metal).filter(func.lower(Metal.name) == name.strip().lower()).first()

    def find_by_ids(self, db: Session, metal_ids: Iterable[int]) -> List[Metal]:
        ids = set(metal_ids)
        if not ids:
            return []
        return db.query(Metal).filter(Metal.id.in_(ids)).all()

    def find_all(self, db: Session) -> List[Metal]:
        return db.query(Metal).order_by(Metal.name, Metal.id).all()

    def update(self, db: Session, metal: Metal, name: str) -> Metal:
        metal.name = name
        db.commit()
        db.refresh(metal)
        return metal

    def delete(self, db: Session, metal: Metal) -> None:
        db.delete(metal)
        db.commit()

    def is_referenced(self, db: Session, metal_id: int) -> bool:
        """True when any compatibility entry records a verdict for this metal"""
        return db.query(
            db.query(CompatibilityPair).filter(CompatibilityPair.metal_id == metal_id).exists()
        ).scalar()


metal_repository = MetalRepository()
