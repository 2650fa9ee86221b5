"""
AutoApply - OCR Service

Reads job posts out of screenshots using the Gemini vision model.
"""
from typing import Optional
import logging

from .ai_service import ai_service, AIService, AIServiceError

logger = logging.getLogger("autoapply.ocr")

OCR_FAILED_MESSAGE = (
    "Failed to extract text from image. Please try typing the job description instead."
)


class OCRServiceError(Exception):
    """Raised when no text could be read from an uploaded image."""
    pass


def detect_mime_type(data: bytes, content_type: Optional[str] = None) -> str:
    """Sniff PNG/JPEG magic bytes, then trust an image/* upload type, else JPEG."""
    if data[:2] == b"\x89\x50":
        return "image/png"
    if data[:2] == b"\xff\xd8":
        return "image/jpeg"
    if content_type and content_type.startswith("image/"):
        return content_type
    return "image/jpeg"


async def extract_text_from_image(
    data: bytes,
    content_type: Optional[str] = None,
    service: Optional[AIService] = None
) -> str:
    """
    Extract text from a job post image.

    Args:
        data: Raw image bytes from the upload
        content_type: Content type the browser reported, if any
        service: AI service to use (defaults to the global one)

    Returns:
        The extracted text, possibly empty if the image holds none

    Raises:
        OCRServiceError: If the image is empty or the model call fails
    """
    from .ai_prompts import OCR_PROMPT

    if not data:
        raise OCRServiceError(OCR_FAILED_MESSAGE)

    service = service or ai_service
    mime_type = detect_mime_type(data, content_type)
    logger.info("Starting Gemini Vision text extraction (%s, %d bytes)", mime_type, len(data))

    try:
        text = await service.generate(
            OCR_PROMPT,
            images=[service.image_part(data, mime_type)],
            model=service.vision_model,
            temperature=0.0
        )
    except AIServiceError as e:
        logger.error("Vision error: %s", e)
        raise OCRServiceError(OCR_FAILED_MESSAGE) from e

    text = text.strip()
    if not text:
        logger.warning("Vision model returned no text")

    logger.info("Extracted %d characters from image", len(text))
    return text
