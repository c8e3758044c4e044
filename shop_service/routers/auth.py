"""Admin authentication API router."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shop_service.config import Settings
from shop_service.database import get_db
from shop_service.dependencies import get_admin_service, get_settings
from shop_service.monitoring import auth_attempts_counter, auth_failures_counter
from shop_service.schemas import LoginRequest, LoginResponse
from shop_service.security import create_access_token
from shop_service.services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    admin_service: AdminService = Depends(get_admin_service)
):
    """Authenticate an admin and return a token valid for 24 hours."""
    auth_attempts_counter.add(1, {"type": "login"})

    admin = admin_service.authenticate(db, request.username, request.password)
    if admin is None:
        auth_failures_counter.add(1, {"reason": "invalid_credentials"})
        logger.warning("Login failed: Invalid credentials", extra={
            "username": request.username
        })
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info("Admin logged in successfully", extra={
        "username": admin.username,
        "admin_id": admin.id
    })
    return LoginResponse(token=create_access_token(admin.id, settings.jwt_secret))
