from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.api.dependencies import require_admin
from app.core.database import get_db
from app.schemas.common import ApiResponse
from app.schemas.metal import MetalCreate, MetalResponse, MetalUpdate
from app.services.metal_service import metal_service

# Every metal route is admin-only
router = APIRouter(prefix="/metals", tags=["metals"], dependencies=[Depends(require_admin)])


@router.get("", response_model=ApiResponse[List[MetalResponse]])
def list_metals(db: Session = Depends(get_db)):
    metals = metal_service.get_all(db)
    return {"message": "Metals retrieved successfully", "data": metals}


@router.post("", response_model=ApiResponse[MetalResponse], status_code=status.HTTP_201_CREATED)
def create_metal(payload: MetalCreate, db: Session = Depends(get_db)):
    metal = metal_service.create(db, payload)
    return {"message": "Metal created successfully", "data": metal}


@router.get("/{metal_id}", response_model=ApiResponse[MetalResponse])
def get_metal(metal_id: int, db: Session = Depends(get_db)):
    metal = metal_service.get_by_id(db, metal_id)
    return {"message": "Metal retrieved successfully", "data": metal}


@router.put("/{metal_id}", response_model=ApiResponse[MetalResponse])
def update_metal(metal_id: int, payload: MetalUpdate, db: Session = Depends(get_db)):
    metal = metal_service.update(db, metal_id, payload)
    return {"message": "Metal updated successfully", "data": metal}


@router.delete("/{metal_id}", response_model=ApiResponse[None])
def delete_metal(metal_id: int, db: Session = Depends(get_db)):
    metal_service.delete(db, metal_id)
    return {"message": "Metal deleted successfully"}
