# (c) Nelen & Schuurmans

from collections.abc import Callable
from contextlib import asynccontextmanager
from inspect import iscoroutinefunction
from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from keyset_python import BadRequest
from keyset_python import DoesNotExist
from keyset_python import StaticCallError
from keyset_python import Unauthorized

from .error_responses import ErrorResponse
from .error_responses import not_found_handler
from .error_responses import static_call_error_handler
from .error_responses import unauthorized_handler
from .error_responses import validation_error_handler
from .error_responses import ValidationErrorResponse
from .response import CanonicalJSONResponse
from .security import AuthSettings
from .security import TokenAuthorizer

__all__ = ["Service"]


async def health_check():
    """Simple health check route"""
    return {"health": "OK"}


async def _maybe_await(func: Callable[[], Any]) -> None:
    if iscoroutinefunction(func):
        await func()
    else:
        func()


def to_lifespan(
    on_startup: list[Callable[[], Any]],
    on_shutdown: list[Callable[[], Any]],
):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for func in on_startup:
            await _maybe_await(func)
        yield
        for func in on_shutdown:
            await _maybe_await(func)

    return lifespan


class Service:
    """Bundles routers into a FastAPI app with authorization and error handling.

    on_startup / on_shutdown are the place to freeze order query registries
    and to connect / disconnect API providers.

    Endpoints return a PageResponse or a CanonicalJSONResponse. Other return
    values pass through jsonable_encoder first, which makes floats of Decimals.
    """

    routers: list[APIRouter]

    def __init__(self, *routers: APIRouter):
        self.routers = list(routers)

    def create_app(
        self,
        title: str,
        description: str = "",
        auth: AuthSettings | None = None,
        on_startup: list[Callable[[], Any]] | None = None,
        on_shutdown: list[Callable[[], Any]] | None = None,
    ) -> FastAPI:
        authorizer = TokenAuthorizer(auth or AuthSettings())
        app = FastAPI(
            title=title,
            description=description,
            lifespan=to_lifespan(on_startup or [], on_shutdown or []),
            default_response_class=CanonicalJSONResponse,
        )
        app.state.authorizer = authorizer
        app.get("/health", include_in_schema=False)(health_check)
        for router in self.routers:
            app.include_router(
                router,
                dependencies=[Depends(authorizer)],
                responses={
                    "400": {"model": ValidationErrorResponse},
                    "default": {"model": ErrorResponse},
                },
            )
        app.add_exception_handler(DoesNotExist, not_found_handler)
        app.add_exception_handler(RequestValidationError, validation_error_handler)
        app.add_exception_handler(BadRequest, validation_error_handler)
        app.add_exception_handler(Unauthorized, unauthorized_handler)
        app.add_exception_handler(StaticCallError, static_call_error_handler)
        return app
