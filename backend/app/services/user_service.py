import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from app.core.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from app.core.security import (
    PASSWORD_RESET_TOKEN_TYPE,
    create_access_token,
    create_password_reset_token,
    decode_token,
    get_password_hash,
    get_token_user_id,
)
from app.models.user import User, UserRole
from app.repositories.user_repository import user_repository
from app.schemas.user import UserRegister, UserUpdate
from app.services.email_service import email_service
from app.utils.pagination import Page, PaginationOptions

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"
# Fields a user may not change on their own profile
PROFILE_PROTECTED_FIELDS = ("role", "is_active")


class UserService:
    def create(self, db: Session, data: UserRegister, role: UserRole = UserRole.USER) -> User:
        if user_repository.find_by_email(db, data.email):
            raise ConflictError("User with this email already exists")

        # The only place a password gets hashed before it is stored
        user = user_repository.create(
            db,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=role,
        )
        logger.info(f"User created: {user.email}")
        return user

    def register(self, db: Session, data: UserRegister) -> User:
        """Self-service signup; always creates a plain user and sends a welcome email"""
        user = self.create(db, data, role=UserRole.USER)
        email_service.send_welcome_email(user.email, user.first_name)
        return user

    def login(self, db: Session, email: str, password: str) -> Dict[str, Any]:
        user = user_repository.find_by_email_and_password(db, email, password)
        # Same message for unknown email and wrong password
        if user is None:
            raise BadRequestError("Invalid email or password")
        if not user.is_active:
            raise BadRequestError("User account is deactivated")

        token = create_access_token(user)
        logger.info(f"User logged in: {user.email}")
        return {"user": user, "token": token}

    def get_by_id(self, db: Session, user_id: int) -> User:
        user = user_repository.find_by_id(db, user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    def get_all(self, db: Session, options: PaginationOptions, is_active: Optional[bool] = None) -> Page:
        return user_repository.find_all(db, options, is_active=is_active)

    def search_users(self, db: Session, term: str, options: PaginationOptions, is_active: Optional[bool] = None) -> Page:
        return user_repository.find_all(db, options, search=term, is_active=is_active)

    def get_users_by_role(self, db: Session, role: UserRole, options: PaginationOptions, is_active: Optional[bool] = None) -> Page:
        return user_repository.find_all(db, options, role=role, is_active=is_active)

    def list_users(
        self,
        db: Session,
        options: PaginationOptions,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> Page:
        """Search and role filters are mutually exclusive; search wins."""
        if search:
            return self.search_users(db, search, options, is_active=is_active)
        if role is not None:
            return self.get_users_by_role(db, role, options, is_active=is_active)
        return self.get_all(db, options, is_active=is_active)

    def update(self, db: Session, user_id: int, data: Dict[str, Any]) -> User:
        user = self.get_by_id(db, user_id)

        new_email = data.get("email")
        if new_email and new_email != user.email:
            if user_repository.find_by_email(db, new_email):
                raise ConflictError("User with this email already exists")

        user = user_repository.update(db, user, data)
        logger.info(f"User updated: {user.email}")
        return user

    def update_user(self, db: Session, user_id: int, payload: UserUpdate) -> User:
        return self.update(db, user_id, payload.model_dump(exclude_none=True))

    def delete(self, db: Session, user_id: int) -> None:
        user = self.get_by_id(db, user_id)
        email = user.email
        user_repository.delete(db, user)
        logger.info(f"User deleted: {email}")

    def change_password(self, db: Session, user_id: int, old_password: str, new_password: str) -> None:
        user = self.get_by_id(db, user_id)
        # Re-verify through the same lookup login uses
        verified = user_repository.find_by_email_and_password(db, user.email, old_password)
        if verified is None:
            raise BadRequestError("Invalid old password")

        user_repository.update_password(db, user, get_password_hash(new_password))
        logger.info(f"Password changed for user: {user.email}")

    def reset_password(self, db: Session, email: str) -> bool:
        """
        Start a password reset.

        Always returns True so callers cannot tell whether the email belongs
        to an account. A reset email is only sent for known addresses.
        """
        user = user_repository.find_by_email(db, email)
        if user is None:
            logger.info(f"Password reset requested for unknown email: {email}")
            return True

        reset_token = create_password_reset_token(user.id)
        email_service.send_password_reset_email(user.email, reset_token, user.full_name)
        logger.info(f"Password reset email dispatched to: {user.email}")
        return True

    def confirm_password_reset(self, db: Session, token: str, new_password: str) -> None:
        try:
            payload = decode_token(token, expected_type=PASSWORD_RESET_TOKEN_TYPE)
            user_id = get_token_user_id(payload)
        except UnauthorizedError:
            raise BadRequestError("Invalid or expired reset token")

        user = user_repository.find_by_id(db, user_id)
        if user is None:
            raise BadRequestError("Invalid or expired reset token")

        user_repository.update_password(db, user, get_password_hash(new_password))
        logger.info(f"Password reset completed for user: {user.email}")

    def deactivate_user(self, db: Session, user_id: int) -> User:
        user = self.get_by_id(db, user_id)
        user = user_repository.set_active(db, user, False)
        logger.info(f"User deactivated: {user.email}")
        return user

    def activate_user(self, db: Session, user_id: int) -> User:
        user = self.get_by_id(db, user_id)
        user = user_repository.set_active(db, user, True)
        logger.info(f"User activated: {user.email}")
        return user

    def get_user_profile(self, db: Session, user_id: int) -> User:
        return self.get_by_id(db, user_id)

    def update_profile(self, db: Session, user_id: int, payload: UserUpdate) -> User:
        data = payload.model_dump(exclude_none=True)
        for field in PROFILE_PROTECTED_FIELDS:
            data.pop(field, None)
        if not data:
            raise BadRequestError("No profile fields to update")
        return self.update(db, user_id, data)


user_service = UserService()
