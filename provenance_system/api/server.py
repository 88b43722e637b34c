from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from typing import Optional
import structlog

from slowapi.errors import RateLimitExceeded
from .limiting import limiter, analyze_rate_limit
from ..exceptions import ConfigurationError, SchemaError, UpstreamError, UpstreamFormatError
from ..orchestrator import Orchestrator

logger = structlog.get_logger()

app = FastAPI(title="Provenance Graph API", version="v1")
app.state.limiter = limiter
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


# ====== Health endpoints ======
@app.get("/health", response_class=PlainTextResponse)
def health():
    return "ok"

# ====== Prometheus metrics ======
@app.get("/metrics")
def metrics():
    data = generate_latest()  # default REGISTRY
    return PlainTextResponse(data, media_type=CONTENT_TYPE_LATEST)

# ====== Error mapping ======
@app.exception_handler(RateLimitExceeded)
def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return _error(status.HTTP_429_TOO_MANY_REQUESTS, "Too Many Requests")

@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return _error(status.HTTP_400_BAD_REQUEST, "Invalid request", f"{field}: {first.get('msg', 'invalid')}")

@app.exception_handler(SchemaError)
def schema_error_handler(request: Request, exc: SchemaError):
    logger.warning("payload_rejected", field=exc.field, reason=exc.reason)
    # the query was fine; the provider sent an unusable payload
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Invalid analysis payload", f"{exc.field}: {exc.reason}")

@app.exception_handler(UpstreamError)
def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error("upstream_failed", error=str(exc), upstream_status=exc.status_code,
                 malformed=isinstance(exc, UpstreamFormatError))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), exc.details)

@app.exception_handler(ConfigurationError)
def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("analysis_crashed")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error")


# Request models
class AnalyzeRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000, description="Topic text or article URL")


_orchestrator: Optional[Orchestrator] = None

def get_orchestrator() -> Orchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator()
    return _orchestrator


# Main analysis endpoint
@app.post("/analyze-query")
@limiter.limit(analyze_rate_limit)
async def analyze_query(request: Request, body: AnalyzeRequest,
                        orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Analyze a topic or URL and return claims, sources and the provenance graph"""
    if not body.query.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request", "query: must not be blank")
    result = await orchestrator.analyze(body.query)
    return JSONResponse(result.to_response())
