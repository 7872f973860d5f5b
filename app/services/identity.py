"""
Caller identity for per-user data (favorites).

There is no authentication: by default the user is whatever ``userId`` the
caller passes, falling back to a fixed placeholder. Handlers only see the
``get_current_user`` dependency, so a real provider can replace this one on
``app.state.identity_provider``.
"""

from typing import Protocol

from fastapi import Request

from app.config import DEFAULT_USER_ID


class IdentityProvider(Protocol):
    def resolve(self, request: Request) -> str:
        ...


class QueryParamIdentityProvider:
    """Reads the user id from a query parameter."""

    def __init__(self, param: str = "userId", default: str = DEFAULT_USER_ID):
        self.param = param
        self.default = default

    def resolve(self, request: Request) -> str:
        return request.query_params.get(self.param) or self.default


def get_current_user(request: Request) -> str:
    provider: IdentityProvider = request.app.state.identity_provider
    return provider.resolve(request)
