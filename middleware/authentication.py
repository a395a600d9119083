"""
Access gate for the API.

Every request under a protected prefix (/api/, /admin/) must carry a valid
session cookie whose user holds one of the roles the matching access rule
allows. The resolved identity is attached to request.state.user for the
route handlers.
"""

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette import status
from core.access import AccessConfig
from schemas.auth_schemas import AuthenticatedUser
from services.auth_service import AuthService
from services.token_service import TokenService
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Per request:
    1. Public path or path outside every protected prefix -> forward
    2. OPTIONS -> 200 with CORS headers
    3. Missing or invalid token cookie -> 401
    4. Token user no longer exists -> 401
    5. Role not allowed by the first matching access rule -> 403
    6. Attach the user to request.state and forward

    An unexpected fault while deciding yields a 500 and never reaches the
    route handler. Database work runs in the threadpool through the session
    factory stored on app.state.
    """

    def __init__(self, app, config: AccessConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next):
        try:
            rejection = await self.authorize(request)
        except Exception as exc:
            logger.error(
                f"Unexpected error in access gate: {str(exc)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error_type": type(exc).__name__
                },
                exc_info=True
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

        if rejection is not None:
            return rejection

        return await call_next(request)

    async def authorize(self, request: Request) -> Response | None:
        """
        Returns the response that ends the request, or None to forward it.
        """
        path = request.url.path

        if self.config.is_public(path):
            logger.debug("Public endpoint accessed", extra={"path": path})
            return None

        rule = self.config.match_rule(path)
        if rule is None:
            return None

        if request.method == "OPTIONS":
            return self.preflight_response(request)

        token = request.cookies.get(self.config.cookie_name)
        if not token:
            return error_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized: Invalid or missing token")

        session_factory = request.app.state.session_factory
        user, reason = await run_in_threadpool(self.resolve_user, session_factory, token)

        if user is None:
            logger.info(
                "Request rejected by access gate",
                extra=sanitize_log_data({"path": path, "reason": reason, "auth_token": token})
            )
            return error_response(status.HTTP_401_UNAUTHORIZED, reason)

        if user.role not in rule.allowed_roles:
            logger.warning(
                "Role not allowed for path",
                extra={"path": path, "user_id": user.id, "role": user.role.value}
            )
            return error_response(status.HTTP_403_FORBIDDEN, rule.denied_message)

        request.state.user = user
        logger.debug(
            "Request authenticated",
            extra={"path": path, "user_id": user.id, "role": user.role.value}
        )
        return None

    @staticmethod
    def resolve_user(session_factory, token: str) -> tuple[AuthenticatedUser | None, str]:
        db = session_factory()
        try:
            if not TokenService.validate(token, db):
                return None, "Unauthorized: Invalid or missing token"

            username = TokenService.extract_username(token)
            model = AuthService.get_user_by_username(db, username) if username else None
            if model is None:
                return None, "Unauthorized: User not found"

            return AuthenticatedUser.model_validate(model), ""
        finally:
            db.close()

    def preflight_response(self, request: Request) -> Response:
        origin = self.config.cors_origin_for(request.headers.get("origin"))
        return Response(
            status_code=status.HTTP_200_OK,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": self.config.allowed_methods,
                "Access-Control-Allow-Headers": self.config.allowed_headers,
                "Access-Control-Expose-Headers": self.config.exposed_headers,
                "Access-Control-Allow-Credentials": "true",
                "Vary": "Origin",
            }
        )
