import json
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from db import init_db
from api.tractors.views import router as tractors_router
from api.tractor_comments.views import router as tractor_comments_router
from api.tractor_issues.views import router as tractor_issues_router

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """CORS origins from settings, or the local frontend dev servers."""
    cors_env = settings.CORS_ORIGINS

    # Try to parse as JSON array
    if cors_env:
        try:
            origins = json.loads(cors_env)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            # If not valid JSON, treat as comma-separated
            return [o.strip() for o in cors_env.split(",") if o.strip()]

    # Default origins for local development
    return [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]


def describe_validation_error(exc: RequestValidationError) -> str:
    """One readable message for a rejected request body."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    for err in errors:
        if err.get("type") == "json_invalid":
            return "Invalid JSON in request body"

    err = errors[0]
    if err.get("type") == "value_error":
        ctx_error = (err.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
        return str(err.get("msg", "")).removeprefix("Value error, ")

    field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
    if err.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    if field:
        return f"{field}: {err.get('msg')}"
    return str(err.get("msg"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Fleet asset service starting (env=%s)", settings.APP_ENV)
    if settings.APP_ENV == "local":
        # No migrations locally; build the schema from the models
        await init_db()
    yield


app = FastAPI(
    title="Fleet Asset Service API",
    description="Tractor lifecycle, audit trail, comments and maintenance issues",
    version="1.0.0",
    lifespan=lifespan,
)

# Get CORS origins from environment or use defaults
cors_origins = get_cors_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed bodies are a 400 and never reach the store
    message = describe_validation_error(exc)
    logger.debug("Rejected %s: %s", request.url.path, message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message},
    )


# Business endpoints
app.include_router(tractors_router, prefix="/api/v1")
app.include_router(tractor_comments_router, prefix="/api/v1")
app.include_router(tractor_issues_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health", tags=["system"])
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
