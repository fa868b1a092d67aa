import logging
from typing import List
from sqlalchemy.orm import Session
from app.core.errors import ConflictError, NotFoundError
from app.models.metal import Metal
from app.repositories.metal_repository import metal_repository
from app.schemas.metal import MetalCreate, MetalUpdate

logger = logging.getLogger(__name__)

METAL_NOT_FOUND_MESSAGE = "Metal not found"


class MetalService:
    def create(self, db: Session, data: MetalCreate) -> Metal:
        if metal_repository.find_by_name(db, data.name):
            raise ConflictError("Metal with this name already exists")

        metal = metal_repository.create(db, data.name)
        logger.info(f"Metal created: {metal.name}")
        return metal

    def get_by_id(self, db: Session, metal_id: int) -> Metal:
        metal = metal_repository.find_by_id(db, metal_id)
        if metal is None:
            raise NotFoundError(METAL_NOT_FOUND_MESSAGE)
        return metal

    def get_all(self, db: Session) -> List[Metal]:
        return metal_repository.find_all(db)

    def update(self, db: Session, metal_id: int, data: MetalUpdate) -> Metal:
        metal = self.get_by_id(db, metal_id)

        if data.name.lower() != metal.name.lower():
            existing = metal_repository.find_by_name(db, data.name)
            if existing and existing.id != metal.id:
                raise ConflictError("Metal with this name already exists")

        metal = metal_repository.update(db, metal, data.name)
        logger.info(f"Metal updated: {metal.name}")
        return metal

    def delete(self, db: Session, metal_id: int) -> None:
        metal = self.get_by_id(db, metal_id)
        if metal_repository.is_referenced(db, metal.id):
            raise ConflictError("Metal is used by compatibility entries and cannot be deleted")

        name = metal.name
        metal_repository.delete(db, metal)
        logger.info(f"Metal deleted: {name}")


metal_service = MetalService()
