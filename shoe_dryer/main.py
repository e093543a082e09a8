"""
FastAPI entrypoint for the shoe-drying advisor.

Routes:
- POST /api/analyze-shoe          structured result from a static prompt
- POST /api/analyze-shoe-context  structured result from a prompt carrying temperature/humidity
- POST /api/analyze-image         free-text description
All three run the same pipeline (analyzer.run_analysis) with a different AnalysisProfile.
"""

import logging
from contextlib import asynccontextmanager

from .config import load_env_file, load_settings, validate_startup, Settings

# Load environment variables from .env file (optional) before reading settings.
load_env_file()
SETTINGS = load_settings()

# Configure logging with environment-based level
logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)
logger.info("Service starting with LOG_LEVEL=%s model=%s", SETTINGS.log_level, SETTINGS.model_name)

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile
from typing import Any, Dict

from .analyzer import (
    FREE_TEXT_PROFILE,
    SHOE_CONTEXT_PROFILE,
    SHOE_PROFILE,
    AnalysisProfile,
    Upload,
    parse_readings,
    run_analysis,
)
from .errors import AnalysisError, InvalidUpload
from .llm_client import create_client
from .schemas import AnalysisResponse, ErrorResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing credential stops startup; the server never accepts traffic without it.
    validate_startup(SETTINGS)
    app.state.genai_client = create_client(SETTINGS.api_key)
    logger.info("genai.client_ready model=%s", SETTINGS.model_name)
    yield


app = FastAPI(title="Shoe Dryer Vision Advisor", lifespan=lifespan)

if SETTINGS.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


def get_settings() -> Settings:
    return SETTINGS


def get_genai_client(request: Request) -> Any:
    return request.app.state.genai_client


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.get("/")
def root():
    return {"ok": True, "service": "shoe_dryer"}


@app.get("/healthz")
def healthz():
    return {"ok": True}


async def _read_upload(request: Request, settings: Settings):
    try:
        form = await request.form()
    except Exception as e:
        raise InvalidUpload(f"Could not read multipart form data: {e}")

    entry = form.get("file")
    if entry is None or not isinstance(entry, StarletteUploadFile):
        raise InvalidUpload('Invalid or missing file upload (expecting field name "file").')

    data = await entry.read()
    if not data:
        raise InvalidUpload("Uploaded file is empty.")
    if len(data) > settings.max_file_size_bytes:
        raise InvalidUpload(f"Uploaded file exceeds the {settings.max_file_size_mb} MB limit.")

    upload = Upload(filename=entry.filename, content_type=entry.content_type, data=data)
    return form, upload


async def _analyze(
    request: Request,
    profile: AnalysisProfile,
    client: Any,
    settings: Settings,
) -> Dict[str, Any]:
    logger.info("analyze.request profile=%s", profile.name)
    try:
        form, upload = await _read_upload(request, settings)
        readings = None
        if profile.requires_readings:
            readings = parse_readings(form.get("temperature"), form.get("humidity"))

        result = await run_analysis(
            client,
            profile,
            upload,
            model_name=settings.model_name,
            readings=readings,
        )
    except AnalysisError as e:
        logger.info("analyze.failed profile=%s status=%d error=%s", profile.name, e.status_code, e.message)
        raise
    except Exception as e:
        logger.error("Global catch error profile=%s", profile.name, exc_info=True)
        raise AnalysisError(
            "Failed to process the request due to an internal server error.",
            details=str(e) or type(e).__name__,
        )

    logger.info(
        "analyze.response profile=%s filename=%s filesize=%d shoe_type=%s minutes=%s",
        profile.name,
        result.get("filename"),
        result.get("filesize"),
        result.get("shoe_type"),
        result.get("recommended_time_minutes"),
    )
    return result


_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.post(
    "/api/analyze-shoe",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def analyze_shoe(
    request: Request,
    client: Any = Depends(get_genai_client),
    settings: Settings = Depends(get_settings),
):
    return await _analyze(request, SHOE_PROFILE, client, settings)


@app.post(
    "/api/analyze-shoe-context",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def analyze_shoe_context(
    request: Request,
    client: Any = Depends(get_genai_client),
    settings: Settings = Depends(get_settings),
):
    return await _analyze(request, SHOE_CONTEXT_PROFILE, client, settings)


@app.post(
    "/api/analyze-image",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def analyze_image(
    request: Request,
    client: Any = Depends(get_genai_client),
    settings: Settings = Depends(get_settings),
):
    return await _analyze(request, FREE_TEXT_PROFILE, client, settings)
