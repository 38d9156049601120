from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
import logging

from app.core.config import settings
from app.modules.auth.models import User
from app.modules.auth.schemas import UserCreate, UserOut, TokenResponse
from app.modules.auth.utils import hash_password, verify_password, create_access_token
from app.modules.ledger.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def create_user(self, user_data: UserCreate) -> User:
        """
        Register a user. The very first account becomes the owner,
        every later one starts as a viewer until an owner/admin promotes it.
        """
        existing = self.db.query(User).filter(User.email == user_data.email).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists"
            )

        role = "owner" if self.db.query(User).count() == 0 else "viewer"
        user = User(
            email=user_data.email,
            password=hash_password(user_data.password),
            full_name=user_data.full_name,
            role=role,
            is_active=True
        )

        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A user with this email already exists"
            )

        logger.info(f"Registered user {user.email} with role {user.role}")
        return user

    def login(self, email: str, password: str) -> TokenResponse:
        user = self.db.query(User).filter(User.email == email).first()

        if not user or not verify_password(password, user.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Inactive account"
            )

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)

        access_token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
        logger.info(f"User {user.email} logged in")

        return TokenResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserOut.model_validate(user)
        )

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def update_role(self, user_id: int, role: str, acting_user_id: int) -> User:
        user = self.get_user(user_id)

        if user.id == acting_user_id and user.role == "owner" and role != "owner":
            owners = self.db.query(User).filter(User.role == "owner", User.is_active == True).count()
            if owners <= 1:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="The last owner cannot give up the owner role"
                )

        old_role = user.role
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.email} role changed from {old_role} to {role}")
        return user
