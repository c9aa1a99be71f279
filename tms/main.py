from contextlib import asynccontextmanager
import asyncio
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tms.core.errors import ConflictError, DomainError, NotFoundError, ValidationError
from tms.core.logging import configure_logging
from tms.services.timesheet_report_worker import start_timesheet_report_task
from tms.models import project, time_entry, timesheet  # noqa: F401
from tms.routers.projects import router as projects_router
from tms.routers.time_entries import router as time_entries_router
from tms.routers.timesheets import router as timesheets_router

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    task = start_timesheet_report_task()
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


app = FastAPI(
    title="Timesheet Management Service",
    lifespan=lifespan,
)


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "Unhandled exception",
            extra={"request_id": request_id, "path": request.url.path},
        )
        response = JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
    response.headers["X-Request-Id"] = request_id
    return response


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status_code = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break

    logger.warning(
        "Request rejected",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "status_code": status_code,
            "error": type(exc).__name__,
            "reason": str(exc),
        },
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        "Request validation failed",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "status_code": 400,
        },
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(projects_router)
app.include_router(timesheets_router)
app.include_router(time_entries_router)


@app.get("/")
def root():
    return {"status": "Timesheet Management Service running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
