"""Admin authentication gate."""
from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException
import jwt
from sqlalchemy.orm import Session

from shop_service.config import Settings
from shop_service.database import get_db
from shop_service.dependencies import get_admin_service, get_settings
from shop_service.models import Admin
from shop_service.monitoring import auth_attempts_counter, auth_failures_counter
from shop_service.security import decode_access_token
from shop_service.services.admin_service import AdminService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _reject(reason: str, **context) -> HTTPException:
    auth_failures_counter.add(1, {"reason": reason})
    logger.warning(f"Authentication failed: {reason}", extra=context)
    # Every cause gets the same response
    return HTTPException(status_code=401, detail="Please authenticate.")


def get_current_admin(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    admin_service: AdminService = Depends(get_admin_service)
) -> Admin:
    """
    Resolve the admin behind a bearer token.

    Args:
        authorization: Authorization header value

    Returns:
        The authenticated admin

    Raises:
        HTTPException: 401 if the header is missing or malformed, the token is
            badly signed or expired, or the admin no longer exists
    """
    auth_attempts_counter.add(1, {"type": "bearer_token"})

    if authorization is None:
        raise _reject("missing_header")

    if not authorization.startswith(BEARER_PREFIX):
        raise _reject("invalid_format", auth_header=authorization[:20])

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        admin_id = decode_access_token(token, settings.jwt_secret)
    except jwt.ExpiredSignatureError:
        raise _reject("expired_token", token_prefix=token[:8])
    except jwt.PyJWTError:
        raise _reject("invalid_token", token_prefix=token[:8])

    admin = admin_service.find_by_id(db, admin_id)
    if admin is None:
        raise _reject("unknown_admin", admin_id=admin_id)

    logger.debug("Authentication successful", extra={"admin_id": admin.id})
    return admin
