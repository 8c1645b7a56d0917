import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateKeyError, NotFoundError
from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Account lifecycle: uniqueness, activation, roles and credential checks"""

    def __init__(self, db: Session):
        self.db = db

    # ---- lookups (never raise on a miss) ----

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_active(self) -> List[User]:
        return self.db.query(User).filter(User.is_active.is_(True)).order_by(User.id).all()

    def list_active_by_role(self, role: UserRole) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == role, User.is_active.is_(True))
            .order_by(User.id)
            .all()
        )

    def list_created_after(self, moment: datetime) -> List[User]:
        return (
            self.db.query(User)
            .filter(User.created_at > moment)
            .order_by(User.created_at.desc())
            .all()
        )

    def username_exists(self, username: str) -> bool:
        return self.db.query(User.id).filter(User.username == username).first() is not None

    def email_exists(self, email: str) -> bool:
        return self.db.query(User.id).filter(User.email == email).first() is not None

    # ---- mutations ----

    def create(self, user_in: UserCreate) -> User:
        """
        Register a new account.

        Raises DuplicateKeyError if the username or email is taken; nothing is
        written in that case. New accounts are active with the USER role.
        """
        if self.username_exists(user_in.username):
            logger.warning("Rejected signup, username taken: %s", user_in.username)
            raise DuplicateKeyError(f"Username already exists: {user_in.username}")
        if self.email_exists(user_in.email):
            logger.warning("Rejected signup, email taken: %s", user_in.email)
            raise DuplicateKeyError(f"Email already exists: {user_in.email}")

        now = datetime.now()
        user = User(
            username=user_in.username,
            email=user_in.email,
            first_name=user_in.first_name,
            last_name=user_in.last_name,
            password=get_password_hash(user_in.password),
            role=UserRole.USER,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        self._commit_unique(user_in.username, user_in.email)
        self.db.refresh(user)

        logger.info("Created user %s (id=%s)", user.username, user.id)
        return user

    def update(self, user_id: int, user_in: UserUpdate) -> User:
        user = self._get_or_raise(user_id)

        if user.username != user_in.username and self.username_exists(user_in.username):
            raise DuplicateKeyError(f"Username already exists: {user_in.username}")
        if user.email != user_in.email and self.email_exists(user_in.email):
            raise DuplicateKeyError(f"Email already exists: {user_in.email}")

        user.username = user_in.username
        user.email = user_in.email
        user.first_name = user_in.first_name
        user.last_name = user_in.last_name
        user.updated_at = datetime.now()

        # Only update password if provided
        if user_in.password:
            user.password = get_password_hash(user_in.password)

        self._commit_unique(user_in.username, user_in.email, user_id=user.id)
        self.db.refresh(user)

        logger.info("Updated user id=%s", user.id)
        return user

    def deactivate(self, user_id: int) -> User:
        """Soft delete: the row and its tasks are kept."""
        return self._set_active(user_id, False)

    def activate(self, user_id: int) -> User:
        return self._set_active(user_id, True)

    def update_role(self, user_id: int, role: UserRole) -> User:
        user = self._get_or_raise(user_id)
        user.role = role
        user.updated_at = datetime.now()
        self.db.commit()
        self.db.refresh(user)

        logger.info("Changed role of user id=%s to %s", user.id, role.value)
        return user

    def validate_credentials(self, username: str, password: str) -> bool:
        """True only for an active account whose stored hash matches; never raises."""
        user = self.get_by_username(username)
        if user is None or not user.is_active:
            return False
        return verify_password(password, user.password)

    # ---- helpers ----

    def _get_or_raise(self, user_id: int) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found with ID: {user_id}")
        return user

    def _commit_unique(self, username: str, email: str, user_id: Optional[int] = None) -> None:
        # A concurrent signup can slip past the exists checks; the unique indexes catch it
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Unique constraint hit for %s / %s", username, email)
            taken = self.db.query(User.id).filter(User.username == username, User.id != user_id)
            if taken.first() is not None:
                raise DuplicateKeyError(f"Username already exists: {username}") from exc
            raise DuplicateKeyError(f"Email already exists: {email}") from exc

    def _set_active(self, user_id: int, active: bool) -> User:
        user = self._get_or_raise(user_id)
        user.is_active = active
        user.updated_at = datetime.now()
        self.db.commit()
        self.db.refresh(user)

        logger.info("%s user id=%s", "Activated" if active else "Deactivated", user.id)
        return user
