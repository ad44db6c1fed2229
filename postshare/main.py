import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import Base, engine
from .exceptions import PostshareError
from .routes import auth as auth_routes
from .routes import posts as posts_routes
from .schemas import format_errors

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Share posts: sign up, log in, and manage the posts you own.",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    # Create tables on startup so the app is immediately usable.
    Base.metadata.create_all(bind=engine)


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    body = {
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
        "message": message,
    }
    if status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, status_code)
    else:
        logger.warning(
            "%s %s -> %s: %s", request.method, request.url.path, status_code, message
        )
    return JSONResponse(body, status_code=status_code)


@app.exception_handler(PostshareError)
async def postshare_error_handler(request: Request, exc: PostshareError):
    return _error_response(request, int(exc.status_code), exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 400, "; ".join(format_errors(exc)))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled application error", exc_info=exc)
    return _error_response(request, 500, "Internal server error")


app.include_router(auth_routes.router, prefix=settings.api_prefix)
app.include_router(posts_routes.router, prefix=settings.api_prefix)


def run() -> None:
    import uvicorn

    uvicorn.run("postshare.main:app", host="0.0.0.0", port=8000)
