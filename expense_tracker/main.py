import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Depends, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.errors import AppError
from expense_tracker.core.logging import setup_logging
from expense_tracker.db.session import get_db, engine, Base
from expense_tracker.db import models  # noqa: F401  registers tables on Base
from expense_tracker.routers import auth, expenses

logger = logging.getLogger(__name__)


def field_error_message(field: str, err: dict) -> str:
    """User-facing text for one Pydantic error."""
    if err.get("type") == "missing":
        name = field.rsplit(".", 1)[-1] or "Value"
        return f"{name.capitalize()} is required"
    msg = err.get("msg", "Invalid value")
    # Our validators raise ValueError with the final message already
    if err.get("type") == "value_error" and msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    return msg


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Zero-setup dev runs; production schemas come from alembic
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.PROJECT_NAME, settings.PROJECT_VERSION)
    yield

def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
            field = ".".join(loc)
            errors.append({"field": field, "message": field_error_message(field, err)})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "errors": errors}
        )
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message}
        )

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": f"Storage failure: {exc.__class__.__name__}"}
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Internal server error"}
        )

    app.include_router(auth.router)
    app.include_router(expenses.router)

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
            return {"status": "online", "database": "connected"}
        except SQLAlchemyError as e:
            logger.warning("Health check could not reach the database: %s", e)
            return {"status": "online", "database": f"disconnected: {str(e)}"}

    return app

app = create_app()
