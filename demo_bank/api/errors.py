"""Exception handlers mapping the error taxonomy onto HTTP responses"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from demo_bank.api.dependencies import get_request_id
from demo_bank.domain.exceptions import DomainException, ErrorKind, InternalError


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if exc.kind is ErrorKind.INTERNAL:
        logging.error(f"Internal error: {exc.message}", extra={"request_id": get_request_id(request)})
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    message = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request"
    return JSONResponse(
        status_code=ErrorKind.VALIDATION.http_status,
        content={"error": message, "kind": ErrorKind.VALIDATION.value},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.error("Unhandled error", exc_info=exc, extra={"request_id": get_request_id(request)})
    return JSONResponse(status_code=500, content=InternalError().to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
