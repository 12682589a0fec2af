from __future__ import annotations


class UnauthenticatedError(Exception):
    """Raised when no role assignment can be resolved for the principal."""


class AuthorizationError(Exception):
    """Base authorization error for RLS enforcement failures."""


class ScopeViolationError(AuthorizationError):
    """Raised when a requested resource or identifier lies outside the resolved scope."""

    def __init__(self, resource: str, dimension: str, message: str | None = None) -> None:
        self.resource = resource
        self.dimension = dimension
        super().__init__(message or f"Access denied to requested {dimension}")


class MalformedScopeError(AuthorizationError):
    """Raised when a role assignment lacks the identifier its own scope requires."""

    def __init__(self, scope: str) -> None:
        self.scope = scope
        super().__init__(f"Malformed role assignment for scope '{scope}'")
