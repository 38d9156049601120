"""
Authentication dependencies for FastAPI.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.models import User
from app.modules.auth.schemas import AuthContext
from app.modules.auth.utils import decode_access_token

# Security scheme
security = HTTPBearer()


class AuthDependencies:
    """Reusable authentication dependencies."""

    @staticmethod
    def get_auth_context(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_db)
    ) -> AuthContext:
        """
        Build the request's AuthContext from the bearer token.
        The user is re-read so deactivated accounts and role changes apply immediately.
        """
        payload = decode_access_token(credentials.credentials)

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token subject",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user = db.query(User).filter(User.id == user_id).first()
        if user is None or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return AuthContext(user_id=user.id, email=user.email, role=user.role)

    @staticmethod
    def require_role(allowed_roles: list[str]):
        """
        Dependency requiring one of the given roles.
        """
        def role_checker(auth_context: AuthContext = Depends(AuthDependencies.get_auth_context)):
            if auth_context.role not in allowed_roles:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"One of these roles is required: {', '.join(allowed_roles)}"
                )
            return auth_context
        return role_checker

    @staticmethod
    def require_owner_or_admin():
        return AuthDependencies.require_role(["owner", "admin"])

    @staticmethod
    def require_writer():
        """Roles allowed to create and edit billing records."""
        return AuthDependencies.require_role(["owner", "admin", "seller", "accountant"])

    @staticmethod
    def require_any_role():
        return AuthDependencies.require_role(["owner", "admin", "seller", "accountant", "viewer"])


get_auth_context = AuthDependencies.get_auth_context
require_owner_or_admin = AuthDependencies.require_owner_or_admin
require_any_role = AuthDependencies.require_any_role
