"""
Exception handlers turning registry errors into HTTP responses.

Every error body has the shape ``{"error": {"code": ..., "message": ...}}``:

* ``RegistryError`` subclasses map to their own status code
  (404 ``not_found``, 403 ``not_authorized``, 400 ``invalid_input``);
* ``HTTPException`` keeps its status code and headers;
* ``StorageError`` is logged with its traceback and answered with a
  generic 500, without details about stored data.

Request body validation errors keep FastAPI's default 422 response.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from pet_registry_api.app.core.exceptions import RegistryError, StorageError

logger = logging.getLogger(__name__)


def _status_to_code(status_code: int) -> str:
    codes = {
        400: "invalid_input",
        401: "unauthorized",
        403: "not_authorized",
        404: "not_found",
        503: "service_unavailable",
    }
    return codes.get(status_code, "error")


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the registry's exception handlers on ``app``."""

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.msg)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": _status_to_code(exc.status_code), "message": exc.detail}},
            headers=exc.headers,
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "Storage failure during %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content={"error": {"code": "internal_error", "message": "An internal error occurred"}},
        )
