import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory.config import Settings
from inventory.exceptions import AuthError, ValidationError
from inventory.models.user import User
from inventory.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, UserInfo
from inventory.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Account registration and token issuing."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def register(self, request: RegisterRequest) -> User:
        """
        Create an account with a hashed password.

        Raises:
            ValidationError: If username or password is missing, or the
                username is taken
        """
        if not request.username or not request.password:
            raise ValidationError("Missing body")

        if self._find(request.username):
            raise ValidationError("Username exists")

        user = User(
            username=request.username,
            password_hash=hash_password(request.password),
            email=request.email or None,
            role="user",
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.db.rollback()
            raise ValidationError("Username exists")

        self.db.refresh(user)
        logger.info(f"User registered: user_id={user.id}, username={user.username}")
        return user

    def login(self, request: LoginRequest) -> LoginResponse:
        """
        Check credentials and issue a bearer token.

        Raises:
            ValidationError: If username or password is missing
            AuthError: If the credentials don't match
        """
        if not request.username or not request.password:
            raise ValidationError("Missing body")

        user = self._find(request.username)
        if not user or not verify_password(request.password, user.password_hash):
            logger.warning(f"Login failed: {request.username}")
            raise AuthError("Invalid credentials")

        token = create_access_token(user.id, user.username, user.role, settings=self.settings)
        logger.info(f"Login successful: user_id={user.id}, username={user.username}")

        return LoginResponse(
            token=token,
            user=UserInfo(id=user.id, username=user.username, role=user.role),
        )

    def _find(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()
