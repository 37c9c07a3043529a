"""
Authentication service handling user registration and login.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tickettango.core.errors import AuthenticationError, ConflictError, StorageError
from tickettango.core.logging import get_logger
from tickettango.core.metrics import record_registration, record_storage_error
from tickettango.core.security import hash_password, token_for_user, verify_password
from tickettango.infrastructure.query import QueryService
from tickettango.schemas.user import AuthResponse, UserCreate, UserLogin, UserSummary

logger = get_logger(__name__)


async def register_user(db: QueryService, user_data: UserCreate) -> AuthResponse:
    """
    Register a new user with a hashed password and return a token.
    Raises ConflictError if the username already exists.
    """
    existing = await db.query(
        "SELECT id FROM users WHERE username = :username",
        {"username": user_data.username},
    )
    if existing.rows:
        record_registration(created=False)
        logger.warning("registration_failed", reason="username_exists", username=user_data.username)
        raise ConflictError("Username already exists")

    params = {
        "username": user_data.username,
        "password_hash": hash_password(user_data.password),
        "email": user_data.email,
    }
    try:
        user_id = await db.insert(
            "INSERT INTO users (username, password_hash, email) VALUES (:username, :password_hash, :email)",
            params,
        )
    except IntegrityError as e:
        # Lost a race with a concurrent registration; the unique index decides
        record_registration(created=False)
        logger.warning("registration_failed", reason="unique_violation", username=user_data.username)
        raise ConflictError("Username already exists") from e
    except SQLAlchemyError as e:
        record_storage_error(db.backend, "register_user")
        logger.error("storage_error", operation="register_user", backend=db.backend, error=str(e))
        raise StorageError() from e

    record_registration(created=True)
    logger.info("user_registered", user_id=user_id, username=user_data.username)
    return AuthResponse(
        message="User created successfully",
        token=token_for_user(user_id, user_data.username),
        user=UserSummary(id=user_id, username=user_data.username),
    )


async def authenticate_user(db: QueryService, login_data: UserLogin) -> AuthResponse:
    """
    Authenticate a user and return a JWT access token.
    Raises AuthenticationError if credentials are invalid.
    """
    result = await db.query(
        "SELECT id, username, password_hash FROM users WHERE username = :username",
        {"username": login_data.username},
    )
    user = result.first()

    if not user or not verify_password(login_data.password, user["password_hash"]):
        logger.warning("login_failed", username=login_data.username)
        raise AuthenticationError("Invalid credentials")

    logger.info("user_logged_in", user_id=user["id"])
    return AuthResponse(
        message="Login successful",
        token=token_for_user(user["id"], user["username"]),
        user=UserSummary(id=user["id"], username=user["username"]),
    )
