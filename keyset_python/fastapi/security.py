import json
import logging
import os

from fastapi import Request

from keyset_python import Unauthorized
from keyset_python import ValueObject

__all__ = ["AuthSettings", "TokenAuthorizer", "is_authorized"]

logger = logging.getLogger(__name__)


class AuthSettings(ValueObject):
    api_auth_tokens: list[str] = []
    require_authorization: bool = False

    @classmethod
    def from_env(cls) -> "AuthSettings":
        raw = os.environ.get("API_AUTH_TOKENS", "[]")
        try:
            tokens = json.loads(raw)
        except ValueError:
            tokens = None
        if not isinstance(tokens, list):
            logger.warning(f"Invalid API_AUTH_TOKENS format: {raw}")
            tokens = []
        require = os.environ.get("REQUIRE_AUTHORIZATION", "").strip()
        return cls(
            api_auth_tokens=[str(x) for x in tokens],
            require_authorization=require not in ("", "false"),
        )


class TokenAuthorizer:
    """Checks bearer tokens against a fixed list of API tokens.

    Authorized callers may request pages larger than the results limit. If
    'require_authorization' is set, every request needs a known token.
    """

    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def is_authorized(self, request: Request) -> bool:
        authorization = request.headers.get("Authorization")
        if authorization is None or not authorization.strip():
            return False
        token = authorization.replace("Bearer ", "").strip()
        return token in self.settings.api_auth_tokens

    async def __call__(self, request: Request) -> None:
        """A fastapi 'dependable' that rejects unauthorized requests, if required"""
        if self.settings.require_authorization and not self.is_authorized(request):
            raise Unauthorized()


async def is_authorized(request: Request) -> bool:
    """A fastapi 'dependable' telling whether the caller is authorized"""
    authorizer: TokenAuthorizer | None = getattr(
        request.app.state, "authorizer", None
    )
    if authorizer is None:
        return False
    return authorizer.is_authorized(request)
