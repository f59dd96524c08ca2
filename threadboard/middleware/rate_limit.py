"""Request rate limiting for the account endpoints, using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from threadboard.config import settings

# Keyed by client address. Posting frequency is enforced separately by the
# post service from users.last_time, not here.
limiter = Limiter(key_func=get_remote_address, storage_uri=settings.rate_limit_storage_uri)


def reset_limiter() -> None:
    """Clear all recorded hits. Used in tests to isolate rate limit state."""
    limiter.reset()
