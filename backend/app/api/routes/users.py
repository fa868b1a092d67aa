from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.api.dependencies import get_current_user, get_pagination, require_admin
from app.core.database import get_db
from app.models.user import User, UserRole
from app.schemas.common import ApiResponse, PaginatedResponse
from app.schemas.user import (
    ChangePassword,
    LoginResponse,
    ResetPasswordConfirm,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from app.services.user_service import user_service
from app.utils.pagination import PaginationOptions

router = APIRouter(prefix="/users", tags=["users"])


# Public
# -----------------------------

@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """Register a new user account (role is always 'user')"""
    user = user_service.register(db, payload)
    return {"message": "User registered successfully", "data": user}


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """Exchange email and password for an access token"""
    result = user_service.login(db, payload.email, payload.password)
    return {"message": "Login successful", "data": result}


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Send a reset link; the response is the same whether or not the email is registered"""
    user_service.reset_password(db, payload.email)
    return {"message": "If the email exists, a password reset link has been sent"}


@router.post("/reset-password/confirm", response_model=ApiResponse[None])
def confirm_reset_password(payload: ResetPasswordConfirm, db: Session = Depends(get_db)):
    user_service.confirm_password_reset(db, payload.token, payload.new_password)
    return {"message": "Password has been reset successfully"}


# Authenticated
# -----------------------------

@router.get("/profile", response_model=ApiResponse[UserResponse])
def get_profile(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user = user_service.get_user_profile(db, current_user.id)
    return {"message": "Profile retrieved successfully", "data": user}


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update own profile; role and active flag are ignored here"""
    user = user_service.update_profile(db, current_user.id, payload)
    return {"message": "Profile updated successfully", "data": user}


@router.put("/change-password", response_model=ApiResponse[None])
def change_password(
    payload: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_service.change_password(db, current_user.id, payload.old_password, payload.new_password)
    return {"message": "Password changed successfully"}


# Admin
# -----------------------------

@router.get("", response_model=PaginatedResponse[UserResponse])
def list_users(
    search: Optional[str] = Query(None, min_length=1),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    pagination: PaginationOptions = Depends(get_pagination),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List users; `search` takes precedence over `role` when both are given"""
    page = user_service.list_users(db, pagination, search=search, role=role, is_active=is_active)
    return {"message": "Users retrieved successfully", "data": page.items, "pagination": page.pagination()}


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = user_service.get_by_id(db, user_id)
    return {"message": "User retrieved successfully", "data": user}


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: int,
    payload: UserUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = user_service.update_user(db, user_id, payload)
    return {"message": "User updated successfully", "data": user}


@router.delete("/{user_id}", response_model=ApiResponse[None])
def delete_user(user_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    user_service.delete(db, user_id)
    return {"message": "User deleted successfully"}


@router.put("/{user_id}/deactivate", response_model=ApiResponse[UserResponse])
def deactivate_user(user_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = user_service.deactivate_user(db, user_id)
    return {"message": "User deactivated successfully", "data": user}


@router.put("/{user_id}/activate", response_model=ApiResponse[UserResponse])
def activate_user(user_id: int, _: User = Depends(require_admin), db: Session = Depends(get_db)):
    user = user_service.activate_user(db, user_id)
    return {"message": "User activated successfully", "data": user}
