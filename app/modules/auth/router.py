from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.modules.auth.service import AuthService
from app.modules.auth.dependencies import get_auth_context, require_owner_or_admin
from app.modules.auth.schemas import UserCreate, UserOut, UserRoleUpdate, TokenResponse, AuthContext

auth_router = APIRouter()


@auth_router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user. The first registered user becomes the owner.
    """
    auth_service = AuthService(db)
    return auth_service.create_user(user_data)


@auth_router.post("/login", response_model=TokenResponse)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Log in with email (as username) and password. Returns a bearer token.
    """
    auth_service = AuthService(db)
    return auth_service.login(form_data.username, form_data.password)


@auth_router.get("/me", response_model=UserOut)
def get_current_user_info(
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    auth_service = AuthService(db)
    return auth_service.get_user(auth_context.user_id)


@auth_router.patch("/users/{user_id}/role", response_model=UserOut)
def update_user_role(
    user_id: int,
    data: UserRoleUpdate,
    db: Session = Depends(get_db),
    auth_context: AuthContext = Depends(require_owner_or_admin())
):
    """
    Change a user's role (owner/admin only).
    """
    auth_service = AuthService(db)
    return auth_service.update_role(user_id, data.role, auth_context.user_id)
