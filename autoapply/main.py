"""
AutoApply - FastAPI application entry point.

A small job-application assistant: paste a job post or upload a screenshot,
get a compatibility score against your CV and a drafted application email,
then send it to the company with one click.
"""
from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import os

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .config import settings
from .rate_limit import limiter, RATE_LIMIT_READ
from .responses import error_response
from .routers import analyze, emails
from .schemas import AIStatusResponse, HealthResponse
from .services.ai_service import ai_service
from .services.cache_service import cache_service
from .services.cv_loader import find_cv_file

# --- Logging Configuration ---
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("autoapply")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the configuration the server starts with."""
    logger.info("Starting AutoApply AI backend...")
    logger.info("Email from: %s", settings.email.smtp_username or "NOT SET")
    if not ai_service.is_available():
        logger.warning("Gemini API key not set - analysis requests will fail")
    cv_path = find_cv_file()
    if cv_path:
        logger.info("Using CV: %s", cv_path)
    else:
        logger.warning("No CV found in %s", os.path.abspath(settings.cv.cv_dir))
    yield
    logger.info("Shutting down AutoApply...")


app = FastAPI(
    title="AutoApply",
    description="Score job posts against your CV and draft application emails",
    version=__version__,
    lifespan=lifespan
)

# --- Rate Limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", str(exc))


# --- Middleware ---
# Parse allowed origins from config
_allowed_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Templates
templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))

# Include routers
app.include_router(analyze.router, prefix="/api", tags=["analyze"])
app.include_router(emails.router, prefix="/api", tags=["email"])


# --- API Endpoints ---

@app.get("/api/health", response_model=HealthResponse, tags=["system"])
async def health_check():
    """Health check endpoint for monitoring."""
    return HealthResponse(
        status="ok",
        message="AutoApply AI Backend Running",
        version=__version__,
        timestamp=datetime.now(timezone.utc)
    )


@app.get("/api/ai/status", response_model=AIStatusResponse, tags=["ai"])
@limiter.limit(RATE_LIMIT_READ)
async def ai_status(request: Request):
    """Check AI service availability and list models."""
    available = ai_service.is_available()
    models = await ai_service.list_models() if available else []
    return AIStatusResponse(
        enabled=ai_service.enabled,
        available=available,
        model=ai_service.model,
        vision_model=ai_service.vision_model,
        models=models,
        cached_items=len(cache_service)
    )


@app.get("/api/ai/prompts", tags=["ai"])
@limiter.limit(RATE_LIMIT_READ)
async def get_all_prompts(request: Request):
    """Get all AI prompt templates."""
    from .services.ai_prompts import ALL_PROMPTS
    return {
        "prompts": {
            name: {
                "template": template,
                "character_count": len(template),
            }
            for name, template in ALL_PROMPTS.items()
        },
        "available_names": list(ALL_PROMPTS.keys())
    }


@app.get("/api/ai/prompts/{prompt_name}", tags=["ai"])
@limiter.limit(RATE_LIMIT_READ)
async def read_prompt(request: Request, prompt_name: str):
    """Get a specific AI prompt template by name."""
    from .services.ai_prompts import ALL_PROMPTS, get_prompt
    template = get_prompt(prompt_name)
    if not template:
        return error_response(
            404,
            f"Prompt '{prompt_name}' not found",
            f"Available: {', '.join(ALL_PROMPTS)}"
        )
    return {
        "name": prompt_name,
        "template": template,
        "character_count": len(template)
    }


# --- Page Routes ---

@app.get("/")
async def chat_page(request: Request):
    """Chat UI."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"applicant_name": settings.applicant.applicant_name}
    )
