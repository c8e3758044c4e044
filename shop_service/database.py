"""Database connection and session management."""
import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from shop_service.models import Base
from shop_service.services.admin_service import AdminService

logger = logging.getLogger(__name__)


class Database:
    """
    Process-wide database handle.

    Built once by the application factory, shared by every request through
    ``app.state.database`` and disposed at shutdown.
    """

    def __init__(self, url: str):
        if url.startswith("sqlite"):
            # Sessions are handed across FastAPI's worker threads
            engine_kwargs = {"connect_args": {"check_same_thread": False}}
        else:
            engine_kwargs = {
                "pool_size": 10,
                "max_overflow": 20,
                "pool_pre_ping": True,  # Verify connections before use
                "pool_recycle": 3600,
                "pool_timeout": 30,
            }
        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(
        self,
        admin_username: Optional[str] = None,
        admin_password: Optional[str] = None
    ) -> None:
        """Create tables and the bootstrap admin if configured."""
        Base.metadata.create_all(bind=self.engine)

        if not (admin_username and admin_password):
            return

        admins = AdminService()
        db = self.session()
        try:
            if admins.count(db) == 0:
                admins.create_admin(db, admin_username, admin_password)
                logger.info("Seeded bootstrap admin", extra={"username": admin_username})
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session.

    Yields:
        Database session bound to the application's database handle
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
