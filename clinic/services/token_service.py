from dataclasses import dataclass
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional

from ..core.config import Settings
from ..core.security import UserRole, create_access_token, verify_token
from ..models import Admin, Doctor, Patient


class Authorizer:
    """Resolves a token identity to an account of one role."""

    role: UserRole

    def lookup(self, db: Session, identity: str) -> Optional[Any]:
        raise NotImplementedError


class AdminAuthorizer(Authorizer):
    role = UserRole.ADMIN

    def lookup(self, db: Session, identity: str) -> Optional[Admin]:
        return db.query(Admin).filter(Admin.username == identity).first()


class DoctorAuthorizer(Authorizer):
    role = UserRole.DOCTOR

    def lookup(self, db: Session, identity: str) -> Optional[Doctor]:
        return db.query(Doctor).filter(Doctor.email == identity).first()


class PatientAuthorizer(Authorizer):
    role = UserRole.PATIENT

    def lookup(self, db: Session, identity: str) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.email == identity).first()


DEFAULT_AUTHORIZERS = (AdminAuthorizer(), DoctorAuthorizer(), PatientAuthorizer())


@dataclass
class AuthorizationResult:
    account: Any = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.account is not None


class TokenService:
    def __init__(self, db: Session, settings: Settings, authorizers=DEFAULT_AUTHORIZERS):
        self.db = db
        self.settings = settings
        self.authorizers: Dict[str, Authorizer] = {
            authorizer.role.value: authorizer for authorizer in authorizers
        }

    def issue(self, identity: str) -> str:
        """Issue a signed token for an email (or admin username)."""
        return create_access_token(identity, self.settings)

    def verify(self, token: str) -> Optional[str]:
        """Return the identity carried by a valid token, None otherwise."""
        payload = verify_token(token, self.settings)
        return payload.sub if payload else None

    def authorize(self, token: str, role: str) -> AuthorizationResult:
        """Check that the token is valid and belongs to an existing account of ``role``."""
        identity = self.verify(token)
        if identity is None:
            return AuthorizationResult(reason="Invalid or expired token")

        role_key = role.value if isinstance(role, UserRole) else str(role).lower()
        authorizer = self.authorizers.get(role_key)
        if authorizer is None:
            return AuthorizationResult(reason=f"Invalid role: {role_key}")

        account = authorizer.lookup(self.db, identity)
        if account is None:
            return AuthorizationResult(reason=f"Invalid {role_key} token: user not found")
        return AuthorizationResult(account=account)
