"""Health endpoint: every path and method reports a healthy service."""

from http import HTTPStatus as HTTPCodes

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(tags=["health"])

MESSAGE_SERVICE_HEALTHY = "ServiceHealthy"
MESSAGE_UNKNOWN_ENDPOINT = "UnknownEndpoint"
MESSAGE_UNEXPECTED_ERROR = "UnexpectedError"

MESSAGE_CODES = {
    MESSAGE_SERVICE_HEALTHY: HTTPCodes.OK,
    MESSAGE_UNKNOWN_ENDPOINT: HTTPCodes.NOT_FOUND,
    MESSAGE_UNEXPECTED_ERROR: HTTPCodes.INTERNAL_SERVER_ERROR,
}

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class HTTPStatus(BaseModel):
    """HTTP status body"""

    code: int
    message: str
    title: str

    @classmethod
    def from_message(cls, message: str) -> "HTTPStatus":
        code = MESSAGE_CODES.get(message)
        if code is None:
            code = HTTPCodes.INTERNAL_SERVER_ERROR
            message = MESSAGE_UNEXPECTED_ERROR
        return cls(code=int(code), message=message, title=code.phrase)


def send_status(message: str) -> JSONResponse:
    status = HTTPStatus.from_message(message)
    return JSONResponse(status_code=status.code, content=status.model_dump())


@router.api_route("/{path:path}", methods=ALL_METHODS)
async def health_check(path: str = ""):
    return send_status(MESSAGE_SERVICE_HEALTHY)
