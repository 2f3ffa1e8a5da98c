"""
FastAPI integration - map credential-store errors to HTTP responses.
Challenge: Consistent error responses without each route re-deriving status codes.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from accounts.errors import UsersError


async def users_error_handler(request: Request, exc: UsersError) -> JSONResponse:
    """Render any UsersError with its own status and payload."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UsersError, users_error_handler)
