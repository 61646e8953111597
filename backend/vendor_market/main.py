import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from vendor_market.api.router import api_router
from vendor_market.api.v1 import dev
from vendor_market.core.config import settings
from vendor_market.core.limiter import limiter
from vendor_market.db import init_db
from vendor_market.web import pages
from vendor_market.web.guards import PageRedirect
from vendor_market.web.templating import templates

logger = logging.getLogger("vendor_market")


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _wants_html(request: Request) -> bool:
    return not request.url.path.startswith("/api")


def create_application() -> FastAPI:
    _configure_logging()
    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)"
        )
        return response

    @app.exception_handler(PageRedirect)
    async def page_redirect_handler(request: Request, exc: PageRedirect):
        return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and _wants_html(request):
            return templates.TemplateResponse(
                request, "pages/not_found.html", {}, status_code=status.HTTP_404_NOT_FOUND
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        error_id = uuid4().hex[:12]
        logger.exception(
            f"Unhandled exception [{error_id}] on {request.method} {request.url.path}: {exc}"
        )
        if _wants_html(request):
            return templates.TemplateResponse(
                request,
                "pages/error.html",
                {"error_id": error_id},
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "error_id": error_id},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)
    app.include_router(dev.router, prefix="/api/dev", tags=["dev"])
    app.include_router(pages.router)

    @app.on_event("startup")
    def _startup() -> None:
        init_db()
        logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")

    return app


app = create_application()
