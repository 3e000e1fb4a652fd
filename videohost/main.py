"""VideoHost FastAPI application.

Assembles the API routers, CORS, observability and the problem-detail error
handlers into a single ASGI app (``videohost.main:app``).
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request, status, APIRouter
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from videohost.core.config import settings
from videohost.core.errors import UnauthenticatedError, VideoHostError
from videohost.db.astra_client import init_astra_db
from videohost.models.common import ProblemDetail
from videohost.api.v1.endpoints import users, videos
from videohost.utils.observability import configure_observability

logger = logging.getLogger(__name__)

app = FastAPI(title="VideoHost - Backend", version=settings.APP_VERSION)

# ---------------------------------------------------------------------------
# CORS middleware
#
# See: https://fastapi.tiangolo.com/tutorial/cors/
# ---------------------------------------------------------------------------

logger.debug(f"CORS origins: {settings.parsed_cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.parsed_cors_origins,
    allow_credentials=settings.parsed_cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix=settings.API_PREFIX)
api_router.include_router(videos.router)
api_router.include_router(users.router)

app.include_router(api_router)

configure_observability(app)


@app.on_event("startup")
async def startup_event():
    await init_astra_db()


def _problem_response(
    request: Request, status_code: int, detail: str, headers: dict | None = None
) -> JSONResponse:
    """Build an RFC 7807-style JSON error body."""

    return JSONResponse(
        status_code=status_code,
        content=ProblemDetail(
            type="about:blank",
            title=HTTPStatus(status_code).phrase,
            status=status_code,
            detail=detail,
            instance=str(request.url),
        ).model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(VideoHostError)
async def videohost_error_handler(request: Request, exc: VideoHostError):
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.detail, exc_info=exc)
    else:
        logger.info("%s: %s", type(exc).__name__, exc.detail)

    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return _problem_response(request, exc.status_code, exc.detail, headers)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _problem_response(request, exc.status_code, exc.detail, exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors and return FastAPI's default 422 response."""
    logger.warning("Request validation failed: %s", exc.errors())
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return _problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected internal server error occurred.",
    )


@app.get("/", summary="Health check")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}!"}
