"""
Startup configuration for the access gate.

The gate never reads module level globals: main.py builds an AccessConfig
from settings and hands it to AuthenticationMiddleware.
"""

from dataclasses import dataclass
from models.enums import Role


@dataclass(frozen=True)
class AccessRule:
    prefix: str
    allowed_roles: frozenset[Role]
    denied_message: str


DEFAULT_ACCESS_RULES: tuple[AccessRule, ...] = (
    AccessRule("/admin/", frozenset({Role.ADMIN}), "Forbidden: Admin access required"),
    AccessRule("/api/", frozenset({Role.CUSTOMER, Role.ADMIN}), "Forbidden: Customer access required"),
)

DEFAULT_PUBLIC_PATHS: frozenset[str] = frozenset({
    "/api/auth/login",
    "/api/auth/register",
    "/api/users/register",
    "/health",
})


@dataclass(frozen=True)
class AccessConfig:
    allowed_origins: tuple[str, ...]
    cookie_name: str = "authToken"
    public_paths: frozenset[str] = DEFAULT_PUBLIC_PATHS
    rules: tuple[AccessRule, ...] = DEFAULT_ACCESS_RULES
    allowed_methods: str = "GET, POST, PUT, DELETE, OPTIONS"
    allowed_headers: str = "Content-Type, Authorization, X-Timestamp, X-Requested-With"
    exposed_headers: str = "Authorization, X-Timestamp"

    def is_public(self, path: str) -> bool:
        return path in self.public_paths

    def match_rule(self, path: str) -> AccessRule | None:
        """First rule whose prefix matches the path, or None for unprotected paths."""
        for rule in self.rules:
            if path.startswith(rule.prefix):
                return rule
        return None

    def cors_origin_for(self, origin: str | None) -> str:
        if origin and origin in self.allowed_origins:
            return origin
        return self.allowed_origins[0] if self.allowed_origins else "*"
