"""
AutoApply - Job post analysis API.

Takes a pasted job description or a screenshot of one, scores it against the
CV, pulls out the recruiter's address and the job title, and drafts the
application email.
"""
from fastapi import APIRouter, File, Form, Request, UploadFile
from typing import Optional
import asyncio
import logging

from ..config import settings
from ..rate_limit import limiter, RATE_LIMIT_AI
from ..responses import error_response
from ..schemas import AnalyzeResponse, ErrorResponse
from ..services.ai_service import ai_service, AIServiceError
from ..services.ocr_service import extract_text_from_image, OCRServiceError

router = APIRouter()
logger = logging.getLogger("autoapply.analyze")

NO_INPUT_MESSAGE = "Please provide a job description or upload an image"


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
@limiter.limit(RATE_LIMIT_AI)
async def analyze_job_post(
    request: Request,
    job_text_field: Optional[str] = Form(None, alias="jobText"),
    image: Optional[UploadFile] = File(None)
):
    """
    Analyze a job post.

    Send either a `jobText` form field or an `image` file. When both are sent
    the text wins and the image is ignored.
    """
    job_text = (job_text_field or "").strip()

    try:
        # Step 1: Screenshot to text
        if image is not None:
            content = await image.read()
            max_bytes = settings.max_upload_mb * 1024 * 1024
            if len(content) > max_bytes:
                return error_response(
                    400, f"Image too large. Maximum size: {settings.max_upload_mb}MB"
                )
            if content and not job_text:
                logger.info("Extracting text from image %s", image.filename)
                job_text = await extract_text_from_image(content, image.content_type)

        if not job_text:
            return error_response(400, NO_INPUT_MESSAGE)

        # Step 2: Job vs CV
        logger.info("Analyzing job compatibility...")
        analysis = await ai_service.analyze_job_vs_cv(job_text)

        # Step 3: Company email and job title
        logger.info("Extracting job details...")
        company_email, job_title = await asyncio.gather(
            ai_service.extract_company_email(job_text),
            ai_service.extract_job_title(job_text)
        )

        # Step 4: Draft the email
        logger.info("Generating email...")
        email = await ai_service.generate_application_email(job_text)

    except (AIServiceError, OCRServiceError) as e:
        logger.error("Error in /api/analyze: %s", e)
        return error_response(500, "Failed to process job post", str(e))

    return AnalyzeResponse(
        job_text=job_text,
        analysis=analysis,
        email=email,
        company_email=company_email,
        job_title=job_title
    )
