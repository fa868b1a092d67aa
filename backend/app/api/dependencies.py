from typing import Iterable, Literal
from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.errors import ForbiddenError, UnauthorizedError
from app.core.security import decode_token, get_token_user_id
from app.models.user import User, UserRole
from app.repositories.user_repository import user_repository
from app.utils.pagination import PaginationOptions

# Bearer scheme - extracts token from the Authorization header
# auto_error=False so a missing header goes through our own error envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.

    The user is reloaded from the database on every request, so a deleted
    account stops working immediately (401) and a deactivated one is
    refused with 403.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")

    payload = decode_token(credentials.credentials)
    user_id = get_token_user_id(payload)

    # If user was deleted after token was issued, this will be None
    user = user_repository.find_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise ForbiddenError("User account is deactivated")

    return user


class RoleChecker:
    """Dependency that lets a request through only for the given roles."""

    def __init__(self, allowed_roles: Iterable[UserRole]):
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(self, user: User = Depends(get_current_user)) -> User:
        if user.role not in self.allowed_roles:
            raise ForbiddenError("Insufficient permissions")
        return user


require_admin = RoleChecker([UserRole.ADMIN])
require_staff = RoleChecker([UserRole.ADMIN, UserRole.MODERATOR])


def get_pagination(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
) -> PaginationOptions:
    """Common listing query parameters; sortBy is checked per resource when the query runs"""
    return PaginationOptions(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
