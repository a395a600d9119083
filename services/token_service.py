import uuid
from datetime import datetime, timezone, timedelta
from sqlalchemy.orm import Session
from jose import jwt, JWTError
from models.session_tokens import SessionToken
from models.users import User
from core.config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TokenService:
    """
    Issues, validates and invalidates session tokens.

    Tokens are signed JWTs carrying the username, and they are also stored
    in the jwt_tokens table so that logout and admin changes can revoke them
    before they expire.
    """

    @staticmethod
    def create_token(username: str, expires_delta: timedelta = None) -> tuple[str, datetime]:
        """
        Creates a signed token for a username.

        Returns:
            Tuple of (token, expires_at)
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.TOKEN_EXPIRE_MINUTES)

        expire = datetime.now(timezone.utc) + expires_delta

        payload = {
            "sub": username,
            "iat": datetime.now(timezone.utc),
            "exp": expire,
            "jti": uuid.uuid4().hex
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM), expire

    @staticmethod
    def issue(user: User, db: Session) -> str:
        """
        Issues a fresh token for a user at login.

        Previously stored tokens for the user are deleted first, so a user
        holds one active token set at a time.
        """
        db.query(SessionToken).filter(SessionToken.user_id == user.id).delete()

        token, expires_at = TokenService.create_token(user.username)
        db.add(SessionToken(user_id=user.id, token=token, expires_at=expires_at))
        db.commit()

        logger.debug("Session token issued", extra={"user_id": user.id})

        return token

    @staticmethod
    def decode(token: str) -> dict:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

    @staticmethod
    def validate(token: str, db: Session) -> bool:
        """
        True only for a well formed, correctly signed, unexpired token that
        is still stored. Fails closed: never raises.
        """
        try:
            payload = TokenService.decode(token)
            if not payload.get("sub"):
                return False

            stored = db.query(SessionToken).filter(SessionToken.token == token).first()
            if stored is None:
                return False

            return _as_utc(stored.expires_at) > datetime.now(timezone.utc)

        except JWTError:
            return False
        except Exception:
            logger.warning("Token validation failed unexpectedly", exc_info=True)
            return False

    @staticmethod
    def extract_username(token: str) -> str | None:
        """
        Username carried by a token. Only meaningful once validate() passed.
        """
        try:
            return TokenService.decode(token).get("sub")
        except JWTError:
            return None

    @staticmethod
    def invalidate(user_id: int, db: Session) -> None:
        """
        Deletes every stored token of a user (logout, admin modification).

        Best effort: a failure is logged and swallowed so the calling
        operation still succeeds.
        """
        try:
            deleted = db.query(SessionToken).filter(
                SessionToken.user_id == user_id
            ).delete()
            db.commit()

            logger.info("Session tokens invalidated", extra={"user_id": user_id, "tokens": deleted})

        except Exception as e:
            db.rollback()
            logger.warning(
                f"Failed to invalidate session tokens: {str(e)}",
                extra={"user_id": user_id, "error_type": type(e).__name__}
            )
