from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from inventory.config import Settings, get_settings
from inventory.database import get_db
from inventory.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from inventory.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user"
)
def register(
    request: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Create an account.

    - **username**: Unique username (required)
    - **password**: Plain password, stored hashed (required)
    - **email**: Optional contact address
    """
    user = service.register(request)
    return RegisterResponse(userId=user.id)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Exchange username and password for a bearer token valid for 24 hours."
)
def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Authenticate and return a token plus the user's id, username and role."""
    return service.login(request)
