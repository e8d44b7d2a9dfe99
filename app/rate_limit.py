"""Per-client rate limiting."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings

settings = get_settings()

limiter = Limiter(key_func=get_remote_address)

AUTH_LIMIT_MESSAGE = "Too many attempts. Please try again in a few minutes."
API_LIMIT_MESSAGE = "Too many requests. Please slow down."

# Strict limit on the credential endpoints: signup, login, forgot and reset password.
auth_limit = limiter.limit(settings.AUTH_RATE_LIMIT, error_message=AUTH_LIMIT_MESSAGE)

# Generous limit shared by every /api route, stacked under auth_limit where both apply.
api_limit = limiter.shared_limit(settings.API_RATE_LIMIT, scope="api", error_message=API_LIMIT_MESSAGE)
