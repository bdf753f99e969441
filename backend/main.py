"""
SuiFlow Payment Processor: FastAPI application.

Widget payments through the on-chain payment_processor contract: coin
selection, MoveCall submission, processor statistics and event history.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.errors import DomainError
from domain.responses import error_response
from routes import coins, events, health, payments, stats
from services.payment_service import PaymentOrchestrator
from sui_client import SuiClient

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, open the node client, build the orchestrator. Shutdown: close the client."""
    settings.validate_production_settings()
    processor_config = settings.processor_config()

    client = SuiClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds)
    app.state.sui_client = client
    app.state.orchestrator = PaymentOrchestrator(client, processor_config, settings.admin_signer)
    logger.info(
        f"Connected to Sui {settings.network} ({settings.rpc_url}); "
        f"processor {processor_config.processor_object_id}"
    )

    yield  # app runs here

    await client.close()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="SuiFlow Payment Processor API",
    description="Widget payments with a fixed admin fee on the Sui payment_processor contract",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(stats.router)
app.include_router(events.router)
app.include_router(payments.router)
app.include_router(coins.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(DomainError)
async def domain_exception_handler(request, exc: DomainError):
    """
    Render core errors with their machine-readable code.

    ``details.funds`` tells the client whether value may have moved
    (not_moved / unknown / rejected / none).
    """
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    details = {**exc.details, "funds": exc.funds.value}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, details),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Missing or malformed request fields are a 400, not FastAPI's default 422."""
    fields = sorted({".".join(str(part) for part in err["loc"][1:]) for err in exc.errors()})
    return JSONResponse(
        status_code=400,
        content=error_response("missing_required_fields", "Missing required fields", {"fields": fields}),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the original HTTP status code and headers, but wraps the payload.
    """
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(
            "http_error", message, detail if not isinstance(detail, str) else None
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("internal_server_error", "Internal server error"),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="info")
