from typing import Any, Dict, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.core.security import verify_password
from app.models.user import User, UserRole
from app.utils.pagination import Page, PaginationOptions, contains_ci, paginate


class UserRepository:
    """Data access for the users table. Emails are compared lowercase."""

    SORT_COLUMNS = {
        "email": User.email,
        "firstName": User.first_name,
        "lastName": User.last_name,
        "createdAt": User.created_at,
        "role": User.role,
    }

    def create(
        self,
        db: Session,
        *,
        email: str,
        hashed_password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(
            email=email.strip().lower(),
            hashed_password=hashed_password,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def find_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.strip().lower()).first()

    def find_by_email_and_password(self, db: Session, email: str, password: str) -> Optional[User]:
        """Return the user only if both the email and the password match"""
        user = self.find_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    def find_all(
        self,
        db: Session,
        options: PaginationOptions,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> Page:
        query = db.query(User)
        if search:
            query = query.filter(or_(
                contains_ci(User.email, search),
                contains_ci(User.first_name, search),
                contains_ci(User.last_name, search),
            ))
        if role is not None:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        return paginate(query, options, self.SORT_COLUMNS, tiebreaker=User.id)

    def update(self, db: Session, user: User, data: Dict[str, Any]) -> User:
        for key, value in data.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user

    def update_password(self, db: Session, user: User, hashed_password: str) -> User:
        return self.update(db, user, {"hashed_password": hashed_password})

    def set_active(self, db: Session, user: User, is_active: bool) -> User:
        return self.update(db, user, {"is_active": is_active})

    def delete(self, db: Session, user: User) -> None:
        db.delete(user)
        db.commit()


user_repository = UserRepository()
