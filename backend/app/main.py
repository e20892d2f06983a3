"""FastAPI application entrypoint.

Responsibilities kept minimal:
  * App / lifespan initialization
  * Router registration (tasks, team members, schedule views)
  * Cross-cutting concerns: logging, metrics middleware & exception handlers
"""

from contextlib import asynccontextmanager
import logging
import os
import re
from fastapi import FastAPI, Request, Response
try:  # Optional OpenTelemetry
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    _otel_available = True
except ImportError:  # pragma: no cover
    _otel_available = False
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from .api.tasks import router as tasks_router
from .api.team_members import router as team_members_router
from .api.schedule import router as schedule_router
from .db.session import engine, Base
from .errors import BaseAppException
from .metrics import REQUEST_COUNT, REQUEST_LATENCY


# --- Optional .env loading (opt-in via APP_LOAD_DOTENV) ---
if os.getenv("APP_LOAD_DOTENV") in {"1", "true", "TRUE", "yes", "on"}:  # pragma: no cover
    try:
        from dotenv import load_dotenv  # type: ignore
        # Respect existing env (override=False). Default search walks up from CWD.
        load_dotenv(override=False)
    except ImportError:
        pass

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - simple startup path
    """Create the schema (idempotent, also run lazily by get_db)."""
    Base.metadata.create_all(bind=engine)
    logger.info("schema ready on %s", engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(title="Team Scheduler API", version="0.1.0", lifespan=lifespan)

# --- OpenTelemetry Tracing (optional) ---
if _otel_available and os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    resource = Resource.create({"service.name": "team-scheduler-backend"})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    tracer = trace.get_tracer(__name__)
else:  # pragma: no cover
    tracer = None

# --- CORS (for local frontend dev) ---
cors_origins_env = os.getenv("CORS_ALLOW_ORIGINS")
if cors_origins_env:
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
else:
    allow_origins = ["http://localhost:3000"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register routers once ---
app.include_router(tasks_router)
app.include_router(team_members_router)
app.include_router(schedule_router)

_TASK_ID_PATH = re.compile(r"^/tasks/[^/]+$")


def _path_label(path: str) -> str:
    # keep label cardinality bounded
    if _TASK_ID_PATH.match(path):
        return "/tasks/:id"
    return path


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    method = request.method
    path_label = _path_label(request.url.path)
    with REQUEST_LATENCY.labels(method=method, path=path_label).time():
        if tracer:
            with tracer.start_as_current_span(f"HTTP {method} {path_label}"):
                response: Response = await call_next(request)
        else:
            response: Response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=path_label, status=str(response.status_code)).inc()
    return response


@app.get("/metrics")
def metrics():  # pragma: no cover - external scrape
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "unexpected error"}},
    )


@app.get("/healthz")
async def health():
    return {"status": "ok", "tracing": "enabled" if tracer else "disabled"}
