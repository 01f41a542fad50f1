from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from messagely.core.exceptions import MessagelyError

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "duplicate_identity": status.HTTP_409_CONFLICT,
    "invalid_argument": status.HTTP_400_BAD_REQUEST,
    "invalid_credentials": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "invalid_token": status.HTTP_401_UNAUTHORIZED,
    "expired_token": status.HTTP_401_UNAUTHORIZED,
    "malformed_token": status.HTTP_401_UNAUTHORIZED,
    "already_read": status.HTTP_409_CONFLICT,
}


def error_body(code: str, message: str, status_code: int) -> dict:
    return {"error": {"code": code, "message": message, "status": status_code}}


async def messagely_error_handler(request: Request, exc: MessagelyError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("Unmapped core error %s on %s: %s", exc.code, request.url.path, exc.detail)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.detail, status_code),
        headers=headers
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MessagelyError, messagely_error_handler)
