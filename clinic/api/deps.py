from fastapi import Depends, HTTPException, Query, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Dict, Optional
import logging

from ..core.config import Settings, get_settings
from ..core.database import get_db, get_redis
from ..core.security import (
    security, AuthenticationError, BadRequestError, ConflictError,
    InternalError, NotFoundError, UserRole
)
from ..models import Admin, Doctor, Patient
from ..services.outcomes import Outcome, ServiceResult
from ..services.token_service import TokenService

logger = logging.getLogger(__name__)

def get_token_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> TokenService:
    return TokenService(db, settings)

async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Extract the bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing authentication token")
    return credentials.credentials

# Role-based access control dependencies
def require_role(role: UserRole):
    """Create a dependency that authorizes the bearer token for ``role`` and returns the account."""
    async def role_checker(
        token: str = Depends(get_bearer_token),
        token_service: TokenService = Depends(get_token_service)
    ):
        result = token_service.authorize(token, role)
        if not result.ok:
            raise AuthenticationError(result.reason)
        return result.account

    return role_checker

# Specific role dependencies
async def get_admin(
    admin: Admin = Depends(require_role(UserRole.ADMIN))
) -> Admin:
    """Require admin role."""
    return admin

async def get_doctor(
    doctor: Doctor = Depends(require_role(UserRole.DOCTOR))
) -> Doctor:
    """Require doctor role."""
    return doctor

async def get_patient(
    patient: Patient = Depends(require_role(UserRole.PATIENT))
) -> Patient:
    """Require patient role."""
    return patient

async def get_doctor_id(doctor: Doctor = Depends(get_doctor)) -> int:
    """Primary key of the doctor the token belongs to."""
    return doctor.id

async def get_patient_id(patient: Patient = Depends(get_patient)) -> int:
    """Primary key of the patient the token belongs to."""
    return patient.id

async def authorize_as(
    user: UserRole = Query(..., description="Role the caller acts as"),
    token: str = Depends(get_bearer_token),
    token_service: TokenService = Depends(get_token_service)
):
    """Authorize the token against the role named in the request; returns (role, account)."""
    result = token_service.authorize(token, user)
    if not result.ok:
        raise AuthenticationError(result.reason)
    return user, result.account

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis),
    settings: Settings = Depends(get_settings)
) -> None:
    """Basic rate limiting for login endpoints."""
    if not settings.RATE_LIMIT_ENABLED:
        return None

    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_MAX_REQUESTS:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)

# Outcome to HTTP error mapping
OUTCOME_ERRORS: Dict[Outcome, type] = {
    Outcome.NOT_FOUND: NotFoundError,
    Outcome.OWNERSHIP_MISMATCH: AuthenticationError,
    Outcome.INVALID_CREDENTIALS: AuthenticationError,
    Outcome.SLOT_CONFLICT: ConflictError,
    Outcome.CONFLICT: ConflictError,
    Outcome.PERSISTENCE_ERROR: InternalError,
}

def raise_for_result(result: ServiceResult) -> ServiceResult:
    """Raise the HTTP error matching a failed service result."""
    if result.ok:
        return result
    error_class = OUTCOME_ERRORS.get(result.outcome, BadRequestError)
    raise error_class(result.message)
