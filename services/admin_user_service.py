from sqlalchemy.orm import Session
from models.users import User
from models.enums import Role
from schemas.admin_schemas import ModifyUserRequest
from services.token_service import TokenService
from core.exceptions import ValidationError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


def _provided(value: str | None) -> bool:
    return value is not None and bool(value.strip())


class AdminUserService:

    @staticmethod
    def get_user(user_id: int, db: Session) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User not found with ID: {user_id}")
        return user

    @staticmethod
    def modify_user(request: ModifyUserRequest, db: Session) -> User:
        """
        Updates username, email and/or role. Blank fields are left alone.

        All of the user's session tokens are invalidated afterwards so the
        new details take effect on the next login. Invalidation is best
        effort and never fails the update.
        """
        user = AdminUserService.get_user(request.user_id, db)
        changes = {}

        if _provided(request.username):
            username = request.username.strip()
            taken = db.query(User).filter(User.username == username, User.id != user.id).first()
            if taken:
                raise ValidationError(f"Username already exists: {username}")
            changes["username"] = username

        if _provided(request.email):
            email = request.email.strip().lower()
            if "@" not in email:
                raise ValidationError("Invalid email format")
            taken = db.query(User).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise ValidationError(f"Email already exists: {email}")
            changes["email"] = email

        if _provided(request.role):
            try:
                changes["role"] = Role(request.role.strip().upper())
            except ValueError:
                raise ValidationError(
                    f"Invalid role: {request.role}. Valid roles are: {', '.join(role.value for role in Role)}"
                )

        # Nothing is written until every field has been checked
        for field, value in changes.items():
            setattr(user, field, value)

        db.commit()
        db.refresh(user)

        TokenService.invalidate(user.id, db)

        logger.info("User modified by admin", extra={"user_id": user.id, "role": user.role.value})

        return user

    @staticmethod
    def to_dict(user: User) -> dict:
        return {
            "userId": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role.value,
            "createdAt": user.created_at,
            "updatedAt": user.updated_at,
        }
