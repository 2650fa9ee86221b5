"""
AutoApply - Centralized rate limiting configuration.

All rate limit decorators should import `limiter` from this module.
The limiter keys on client IP address (via X-Forwarded-For when behind a proxy).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# --- Rate limit constants ---

# AI-powered endpoints (each request makes several Gemini calls) - strictest
RATE_LIMIT_AI = "5/minute"

# Outgoing email - moderate
RATE_LIMIT_EMAIL = "10/minute"

# Read-heavy endpoints (status, prompts) - generous (1/sec sustained)
RATE_LIMIT_READ = "60/minute"
