from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.config import Settings, get_settings
from ...core.database import get_db
from ...api.deps import rate_limit_check, raise_for_result
from ...services.admin_service import AdminService
from ...schemas.auth import AdminLogin, TokenResponse

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.post("/login", response_model=TokenResponse)
async def admin_login(
    login_data: AdminLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _: None = Depends(rate_limit_check)
):
    """Authenticate an admin and return an access token."""
    admin_service = AdminService(db, settings)
    result = raise_for_result(admin_service.login(login_data.username, login_data.password))
    return TokenResponse(token=result.value)
