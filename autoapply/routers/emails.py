"""
AutoApply - Application email sending API.
"""
from fastapi import APIRouter, Request
import logging

from ..rate_limit import limiter, RATE_LIMIT_EMAIL
from ..responses import error_response
from ..schemas import SendEmailRequest, SendEmailResponse, ErrorResponse, is_valid_email
from ..services.email_service import email_service, EmailServiceError

router = APIRouter()
logger = logging.getLogger("autoapply.emails")


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
@limiter.limit(RATE_LIMIT_EMAIL)
async def send_application_email(request: Request, data: SendEmailRequest):
    """Send the drafted email to the company, with the CV attached."""
    if data.missing_fields():
        return error_response(400, "Missing required fields: to, subject, body")

    to_email = data.to.strip()
    if not is_valid_email(to_email):
        return error_response(400, f"Invalid recipient email address: {to_email}")

    logger.info("Sending email to: %s", to_email)
    try:
        await email_service.send_email(to_email, data.subject.strip(), data.body)
    except EmailServiceError as e:
        logger.error("Error sending email: %s", e)
        return error_response(500, "Failed to send email", str(e))

    return SendEmailResponse(success=True, message="Email sent successfully!")
