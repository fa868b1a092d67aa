from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.api.dependencies import require_admin
from app.core.database import get_db
from app.schemas.common import ApiResponse
from app.schemas.compatibility import (
    CompatibilityCreate,
    CompatibilityResponse,
    CompatibilityUpdate,
    MatrixView,
    VersionedCompatibilityResponse,
    VersionResponse,
)
from app.services.compatibility_service import compatibility_service

router = APIRouter(prefix="/compatibilities", tags=["compatibilities"])


# Public - consumed by the web and iOS clients
# -----------------------------

@router.get("/web-app", response_model=ApiResponse[List[CompatibilityResponse]])
def list_for_web_app(db: Session = Depends(get_db)):
    entries = compatibility_service.get_all(db)
    return {"message": "Compatibilities retrieved successfully", "data": entries}


@router.get("/ios-app", response_model=VersionedCompatibilityResponse)
def list_for_ios_app(db: Session = Depends(get_db)):
    """Full list plus the version counter so the app can tell whether its cache is stale"""
    result = compatibility_service.get_all_with_version(db)
    return {
        "message": "Compatibilities retrieved successfully",
        "version": result["version"],
        "data": result["compatibilities"],
    }


@router.get("/matrix", response_model=ApiResponse[MatrixView])
def matrix_view(db: Session = Depends(get_db)):
    matrix = compatibility_service.get_matrix_view(db)
    return {"message": "Compatibility matrix retrieved successfully", "data": matrix}


@router.get("/version", response_model=ApiResponse[VersionResponse])
def current_version(db: Session = Depends(get_db)):
    version = compatibility_service.get_version(db)
    return {"message": "Compatibility version retrieved successfully", "data": {"version": version}}


# Admin
# -----------------------------

@router.get("", response_model=ApiResponse[List[CompatibilityResponse]], dependencies=[Depends(require_admin)])
def list_compatibilities(db: Session = Depends(get_db)):
    entries = compatibility_service.get_all(db)
    return {"message": "Compatibilities retrieved successfully", "data": entries}


@router.post(
    "",
    response_model=ApiResponse[CompatibilityResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_compatibility(payload: CompatibilityCreate, db: Session = Depends(get_db)):
    entry = compatibility_service.create(db, payload)
    return {"message": "Compatibility created successfully", "data": entry}


@router.get("/{entry_id}", response_model=ApiResponse[CompatibilityResponse], dependencies=[Depends(require_admin)])
def get_compatibility(entry_id: int, db: Session = Depends(get_db)):
    entry = compatibility_service.get_by_id(db, entry_id)
    return {"message": "Compatibility retrieved successfully", "data": entry}


@router.put("/{entry_id}", response_model=ApiResponse[CompatibilityResponse], dependencies=[Depends(require_admin)])
def update_compatibility(entry_id: int, payload: CompatibilityUpdate, db: Session = Depends(get_db)):
    entry = compatibility_service.update(db, entry_id, payload)
    return {"message": "Compatibility updated successfully", "data": entry}


@router.delete("/{entry_id}", response_model=ApiResponse[None], dependencies=[Depends(require_admin)])
def delete_compatibility(entry_id: int, db: Session = Depends(get_db)):
    compatibility_service.delete(db, entry_id)
    return {"message": "Compatibility deleted successfully"}
