"""Admin credential store."""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from shop_service.models import Admin
from shop_service.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class AdminService:
    """Lookups and account creation for admin credentials."""

    def find_by_username(self, db: Session, username: str) -> Optional[Admin]:
        return db.execute(
            select(Admin).where(Admin.username == username)
        ).scalar_one_or_none()

    def find_by_id(self, db: Session, admin_id: str) -> Optional[Admin]:
        return db.get(Admin, admin_id)

    def authenticate(self, db: Session, username: str, password: str) -> Optional[Admin]:
        """Return the admin when username and password match, otherwise None."""
        admin = self.find_by_username(db, username)
        if admin is None or not verify_password(password, admin.password_hash):
            return None
        return admin

    def create_admin(self, db: Session, username: str, password: str) -> Admin:
        """
        Create an admin account.

        Raises:
            ValueError: If the username is empty or already taken
        """
        if not username or not password:
            raise ValueError("Username and password are required")
        if self.find_by_username(db, username) is not None:
            raise ValueError(f"Admin {username!r} already exists")

        admin = Admin(username=username, password_hash=hash_password(password))
        db.add(admin)
        db.commit()
        db.refresh(admin)
        logger.info("Admin account created", extra={
            "admin_id": admin.id,
            "username": username
        })
        return admin

    def count(self, db: Session) -> int:
        return db.query(Admin).count()
