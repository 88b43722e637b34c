from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import get_settings

limiter = Limiter(key_func=get_remote_address)


def analyze_rate_limit() -> str:
    """Per-client limit for analysis requests (API_RATE_LIMIT)."""
    return get_settings().API_RATE_LIMIT
