from utils.hashing import verify_password, get_password_hash
from models.users import User
from models.enums import Role
from schemas.auth_schemas import RegisterRequest
from sqlalchemy.orm import Session
from core.exceptions import ConflictError, UnauthorizedError
from utils.logger import get_logger

logger = get_logger(__name__)

class AuthService:

    @staticmethod
    def register_user(request: RegisterRequest, db: Session) -> User:
        """
        Creates a new customer account.

        Flow:
        1. Reject a taken username
        2. Reject a registered email
        3. Hash the password and store the user as CUSTOMER
        """
        username = request.username.strip()
        email = request.email.lower().strip()

        if db.query(User).filter(User.username == username).first():
            logger.warning(
                "Registration attempt with existing username",
                extra={"username": username}
            )
            raise ConflictError("Username is already taken")

        if db.query(User).filter(User.email == email).first():
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": email}
            )
            raise ConflictError("Email is already registered")

        model = User(
            username=username,
            email=email,
            hashed_password=get_password_hash(request.password),
            role=Role.CUSTOMER
        )

        db.add(model)
        db.commit()
        db.refresh(model)

        return model


    @staticmethod
    def authenticate(username: str, password: str, db: Session) -> User:
        user = db.query(User).filter(User.username == username).first()

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"username": username}
            )
            raise UnauthorizedError("Invalid username or password")

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "username": username}
            )
            raise UnauthorizedError("Invalid username or password")

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "username": username}
        )

        return user

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> User | None:
        return db.query(User).filter(User.username == username).one_or_none()
