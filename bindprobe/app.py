import logging
import time
from datetime import datetime

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Config
from .core.middleware import binding_exception_handler, global_exception_handler, log_requests
from .core.validation import validate_content_type, validate_form_fields, validate_status_code
from .services.binder import BindingError, bind
from .services.shapes import BINDING_MODEL, BindingMode

logger = logging.getLogger(__name__)


def get_binding_mode() -> BindingMode:
    """Binding mode for the bind-model probe, taken from configuration."""
    return BindingMode(Config.BINDING_MODE.lower())


# Initialize FastAPI
app = FastAPI(title="Form Binding Probe")

# CORS setup
ALLOWED_ORIGINS = Config.allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

@app.middleware("http")
async def _log_requests(request, call_next):
    return await log_requests(request, call_next)

@app.exception_handler(BindingError)
async def _binding_exception_handler(request, exc):
    return await binding_exception_handler(request, exc)

@app.exception_handler(Exception)
async def _global_exception_handler(request, exc):
    return await global_exception_handler(request, exc)


@app.post("/bindModel")
async def bind_model(request: Request, mode: BindingMode = Depends(get_binding_mode)):
    """Bind the posted form onto the binding model and echo its StatusCode.

    - Accepts url-encoded or multipart forms without file parts
    - Binding failures surface as 400 through the exception handler
    - Responds with an empty body and the bound StatusCode

    There is no anti-forgery check on this route; it only measures binding.
    """
    validate_content_type(request.headers.get("content-type"))
    async with request.form() as form:
        validate_form_fields(form)
        record = bind(form, BINDING_MODEL, mode)

    validate_status_code(record.status_code)

    return Response(status_code=record.status_code)


@app.get("/health")
async def health_check():
    """Basic health and configuration checks for the API."""
    health_start_time = time.time()

    try:
        Config.validate()

        health_duration = time.time() - health_start_time

        return {
            "status": "healthy",
            "service": "form-binding-probe",
            "binding_mode": get_binding_mode().value,
            "environment": Config.ENVIRONMENT,
            "timestamp": datetime.now().isoformat(),
            "response_time_ms": round(health_duration * 1000, 2)
        }
    except ValueError as e:
        health_duration = time.time() - health_start_time
        logger.error(f"Health check failed: {str(e)} - Duration: {health_duration:.1f}s")

        return {
            "status": "unhealthy",
            "service": "form-binding-probe",
            "environment": Config.ENVIRONMENT,
            "timestamp": datetime.now().isoformat(),
            "error": str(e),
            "response_time_ms": round(health_duration * 1000, 2)
        }


@app.get("/")
async def root():
    """Return basic API information."""

    return {
        "service": "Form Binding Probe",
        "version": "1.0",
        "endpoints": {
            "bind_model": "/bindModel",
            "health": "/health"
        },
        "timestamp": datetime.now().isoformat(),
        "description": "Binds form-encoded payloads onto a typed model and echoes the submitted StatusCode"
    }
