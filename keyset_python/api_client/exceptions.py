from http import HTTPStatus
from typing import Any

from keyset_python import StaticCallError

__all__ = ["ApiException", "Unresponsive", "MalformedResponse", "StaticCallError"]


class ApiException(ValueError):
    def __init__(self, obj: Any, status: HTTPStatus):
        self.status = status
        super().__init__(obj)

    def __str__(self):
        return f"{self.status}: {super().__str__()}"


class Unresponsive(ApiException):
    """The remote did not answer within the timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Not responsive after {timeout:g} seconds",
            status=HTTPStatus.GATEWAY_TIMEOUT,
        )

    def __str__(self):
        return self.args[0]


class MalformedResponse(ApiException):
    def __init__(self, obj: Any):
        super().__init__(obj, status=HTTPStatus.OK)

    def __str__(self):
        return f"Malformed response: {self.args[0]!r}"
