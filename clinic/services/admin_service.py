from sqlalchemy.orm import Session
import logging

from ..core.config import Settings
from ..core.security import get_password_hash, verify_password
from ..models import Admin
from .outcomes import Outcome, ServiceResult
from .token_service import TokenService

logger = logging.getLogger(__name__)

class AdminService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def login(self, username: str, password: str) -> ServiceResult:
        """Validate admin credentials; the token subject is the username."""
        admin = self.db.query(Admin).filter(Admin.username == username).first()
        if not admin:
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid username.")
        if not verify_password(password, admin.password_hash):
            return ServiceResult.failure(Outcome.INVALID_CREDENTIALS, "Invalid password.")

        return ServiceResult.success(TokenService(self.db, self.settings).issue(admin.username))

    def ensure_admin(self, username: str, password: str) -> Admin:
        """Create the admin account if it does not exist yet."""
        admin = self.db.query(Admin).filter(Admin.username == username).first()
        if admin:
            return admin

        admin = Admin(username=username, password_hash=get_password_hash(password))
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        logger.info(f"Created admin account '{username}'")
        return admin
