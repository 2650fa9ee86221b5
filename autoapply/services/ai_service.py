"""
AutoApply - AI Service (Gemini Integration)

Thin client over the Gemini `generateContent` REST API.

Setup:
1. Create an API key at https://aistudio.google.com/app/apikey
2. Set AUTOAPPLY_GEMINI_API_KEY in .env
3. Run `python scripts/list_models.py` to see which models the key can use

This service provides:
- Job vs CV compatibility analysis (cached)
- Job title and company email extraction (cached)
- Application email drafting with a static signature
- Raw multimodal generation used by the OCR service
- Retry with exponential backoff on rate limits
"""
from typing import List, Dict, Optional, Any, Awaitable, Callable, TypeVar
import asyncio
import base64
import json
import logging
import re

import httpx
from pydantic import ValidationError

from ..config import settings
from ..schemas import JobAnalysis, is_valid_email
from .cache_service import CacheService, cache_service, get_cache_key
from .cv_loader import load_cv

logger = logging.getLogger("autoapply.ai")

T = TypeVar("T")

DEFAULT_JOB_TITLE = "the Position"

SIGNATURE_MARKERS = ["Best regards", "Sincerely", "Thank you", "Kind regards"]
PHONE_LINE = re.compile(r'^\d{10}$')


class AIServiceError(Exception):
    """Custom exception for AI service errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limit(self) -> bool:
        message = str(self)
        return self.status_code == 429 or "429" in message or "quota" in message.lower()


class AIService:
    """
    AI Service for hosted LLM inference via the Gemini REST API.

    Results that depend only on the job text are memoized in the
    disk-backed cache, keyed by an MD5 of the text.
    """

    def __init__(
        self,
        cache: Optional[CacheService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize AI service with settings."""
        self.base_url = settings.ai.gemini_base_url.rstrip("/")
        self.api_key = settings.ai.gemini_api_key
        self.model = settings.ai.gemini_model
        self.vision_model = settings.ai.gemini_vision_model
        self.enabled = settings.ai.ai_enabled
        self.temperature = settings.ai.ai_temperature
        self.max_tokens = settings.ai.ai_max_tokens
        self.timeout = settings.ai.ai_timeout
        self.max_attempts = settings.ai.ai_retry_max_attempts
        self.base_delay = settings.ai.ai_retry_base_delay
        self.cache = cache if cache is not None else cache_service
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=timeout or self.timeout,
            headers={"x-goog-api-key": self.api_key or ""}
        )

    def is_available(self) -> bool:
        """True when AI is enabled and an API key is configured."""
        if not self.enabled:
            logger.debug("AI is disabled in settings")
            return False
        return bool(self.api_key)

    async def list_models(self) -> List[str]:
        """
        List models the API key can call with generateContent.

        Returns:
            Model names without the "models/" prefix (e.g. ["gemini-2.5-flash"])
            Empty list if the API is unavailable
        """
        if not self.is_available():
            return []

        try:
            async with self._client(timeout=10.0) as client:
                response = await client.get(f"{self.base_url}/models")
            if response.status_code != 200:
                logger.warning("Model listing returned status %s", response.status_code)
                return []

            data = response.json()
            models = [
                model["name"].replace("models/", "", 1)
                for model in data.get("models", [])
                if "generateContent" in model.get("supportedGenerationMethods", [])
            ]
            logger.debug("Found %d Gemini models", len(models))
            return models
        except Exception as e:
            logger.error("Failed to list models: %s", e)
            return []

    # --- Raw generation ---

    @staticmethod
    def image_part(data: bytes, mime_type: str) -> Dict[str, Any]:
        """Build an inline image part for a multimodal request."""
        return {
            "inline_data": {
                "mime_type": mime_type,
                "data": base64.b64encode(data).decode("ascii")
            }
        }

    async def _generate_once(
        self,
        parts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float],
        max_tokens: Optional[int]
    ) -> str:
        """Single call to generateContent. Raises AIServiceError on any failure."""
        generation_config: Dict[str, Any] = {
            "temperature": self.temperature if temperature is None else temperature
        }
        if max_tokens or self.max_tokens:
            generation_config["maxOutputTokens"] = max_tokens or self.max_tokens

        request_body = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config
        }

        try:
            async with self._client() as client:
                logger.debug("Generating with model %s", model)
                response = await client.post(
                    f"{self.base_url}/models/{model}:generateContent",
                    json=request_body
                )
        except httpx.TimeoutException:
            logger.error("AI generation timed out")
            raise AIServiceError("AI generation timed out")
        except httpx.HTTPError as e:
            logger.error("Lost connection to Gemini: %s", e)
            raise AIServiceError(f"Could not reach Gemini: {e}")

        if response.status_code != 200:
            raise AIServiceError(
                f"Gemini returned status {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise AIServiceError("Gemini returned a non-JSON response")

        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise AIServiceError(f"Gemini returned no output ({reason})")

        content_parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in content_parts)

        logger.debug("Generated %d characters", len(text))
        return text.strip()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("error", {}).get("message", response.text)
        except ValueError:
            return response.text

    async def retry_with_backoff(self, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Await `fn`, retrying rate-limit failures with exponential backoff.

        At most `max_attempts` attempts; the delay doubles from `base_delay`.
        Any other error, or a failure on the last attempt, is re-raised.
        """
        attempts = max(1, self.max_attempts)
        for attempt in range(attempts):
            try:
                return await fn()
            except AIServiceError as e:
                if not e.is_rate_limit or attempt == attempts - 1:
                    raise
                delay = self.base_delay * (2 ** attempt)
                logger.warning(
                    "Rate limit hit (attempt %d/%d), retrying in %.1fs",
                    attempt + 1, attempts, delay
                )
                await asyncio.sleep(delay)
        raise AIServiceError("Retry loop exited without a result")

    async def generate(
        self,
        prompt: str,
        images: Optional[List[Dict[str, Any]]] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Generate text from a prompt and optional inline image parts.

        Raises:
            AIServiceError: If the API is not configured or generation fails
        """
        if not self.is_available():
            raise AIServiceError("Gemini is not configured. Set AUTOAPPLY_GEMINI_API_KEY.")

        parts: List[Dict[str, Any]] = [{"text": prompt}] + list(images or [])
        return await self.retry_with_backoff(
            lambda: self._generate_once(parts, model or self.model, temperature, max_tokens)
        )

    # --- Job post operations ---

    async def analyze_job_vs_cv(self, job_text: str) -> JobAnalysis:
        """
        Score the job post against the CV.

        Returns:
            JobAnalysis with compatibility, matching/missing skills, eligibility

        Raises:
            AIServiceError: If the CV is missing or the model output is unusable
        """
        cache_key = get_cache_key(job_text, "analysis")
        if self.cache.has(cache_key):
            try:
                analysis = JobAnalysis.model_validate(self.cache.get(cache_key))
                logger.info("Using cached analysis")
                return analysis
            except ValidationError as e:
                logger.warning("Discarding unusable cached analysis: %s", e)

        from .ai_prompts import JOB_ANALYSIS_PROMPT

        try:
            cv_text = load_cv()
            prompt = JOB_ANALYSIS_PROMPT.format(cv_text=cv_text, job_text=job_text)
            response = await self.generate(prompt, temperature=0.2)
            analysis = self._parse_analysis(response)
        except Exception as e:
            logger.error("Gemini analysis error: %s", e)
            raise AIServiceError("Failed to analyze job compatibility") from e

        self.cache.set(cache_key, analysis.model_dump(mode="json", by_alias=True))
        logger.info("Job analysis complete (%d%% match)", analysis.compatibility)
        return analysis

    @staticmethod
    def _strip_code_fences(text: str) -> str:
        text = re.sub(r'```(?:json)?\s*', '', text)
        return text.strip()

    def _parse_analysis(self, response: str) -> JobAnalysis:
        """Parse the JSON verdict, tolerating code fences and stray prose."""
        text = self._strip_code_fences(response)
        json_match = re.search(r'\{[\s\S]*\}', text)
        if not json_match:
            raise ValueError("No JSON object in analysis response")
        return JobAnalysis.model_validate(json.loads(json_match.group()))

    async def extract_job_title(self, job_text: str) -> str:
        """Extract the position title. Falls back to "the Position"."""
        cache_key = get_cache_key(job_text, "title")
        if self.cache.has(cache_key):
            logger.info("Using cached job title")
            return self.cache.get(cache_key)

        from .ai_prompts import JOB_TITLE_PROMPT

        try:
            response = await self.generate(JOB_TITLE_PROMPT.format(job_text=job_text), temperature=0.0)
        except AIServiceError as e:
            logger.error("Job title extraction error: %s", e)
            return DEFAULT_JOB_TITLE

        title = response.strip().strip('"').strip() or DEFAULT_JOB_TITLE
        self.cache.set(cache_key, title)
        logger.info("Job title extracted: %s", title)
        return title

    async def extract_company_email(self, job_text: str) -> Optional[str]:
        """Extract the HR/recruitment address, or None when there isn't a valid one."""
        cache_key = get_cache_key(job_text, "email")
        if self.cache.has(cache_key):
            logger.info("Using cached company email")
            return self.cache.get(cache_key)

        from .ai_prompts import COMPANY_EMAIL_PROMPT

        try:
            response = await self.generate(COMPANY_EMAIL_PROMPT.format(job_text=job_text), temperature=0.0)
        except AIServiceError as e:
            logger.error("Email extraction error: %s", e)
            return None

        email = response.strip()
        valid_email = email if is_valid_email(email) else None

        # A miss is cached too
        self.cache.set(cache_key, valid_email)

        if valid_email:
            logger.info("Company email extracted: %s", valid_email)
        else:
            logger.warning("No valid email found in job description")
        return valid_email

    async def generate_application_email(self, job_text: str) -> str:
        """
        Draft the application email body and append the static signature.

        Raises:
            AIServiceError: If the CV is missing or generation fails
        """
        from .ai_prompts import APPLICATION_EMAIL_PROMPT

        try:
            cv_text = load_cv()
            prompt = APPLICATION_EMAIL_PROMPT.format(cv_text=cv_text, job_text=job_text)
            body = await self.generate(prompt)
        except Exception as e:
            logger.error("Gemini email generation error: %s", e)
            raise AIServiceError("Failed to generate email") from e

        email = self._strip_signature(body) + "\n\n" + self._build_signature()
        logger.info("Email generated")
        return email

    def _signature_words(self) -> List[str]:
        """Applicant first name and website host stem, matched as whole words."""
        words = []
        name = settings.applicant.applicant_name.strip()
        if name:
            words.append(name.split()[0])
        website = settings.applicant.applicant_website.strip()
        if website:
            host = re.sub(r'^https?://', '', website).split('/')[0]
            if host.startswith("www."):
                host = host[4:]
            stem = host.split('.')[0]
            # Skip short stems such as "me"
            if len(stem) >= 4:
                words.append(stem)
        return words

    def _strip_signature(self, text: str) -> str:
        """Drop everything from the first signature-looking line onward."""
        word_patterns = [re.compile(r'\b' + re.escape(w) + r'\b') for w in self._signature_words()]
        kept = []
        for line in text.split("\n"):
            stripped = line.strip()
            if (
                PHONE_LINE.match(stripped)
                or any(m in stripped for m in SIGNATURE_MARKERS)
                or any(p.search(stripped) for p in word_patterns)
            ):
                break
            kept.append(line)
        return "\n".join(kept).strip()

    def _build_signature(self) -> str:
        applicant = settings.applicant
        lines = ["Best regards,"]
        lines.extend(
            value.strip() for value in (
                applicant.applicant_name,
                applicant.applicant_phone,
                applicant.applicant_website,
                applicant.applicant_email,
            )
            if value and value.strip()
        )
        return "\n".join(lines)


# Global service instance for convenience
ai_service = AIService()
