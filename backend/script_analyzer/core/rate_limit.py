"""
Shared slowapi limiter.

Lives outside main.py so routers can decorate endpoints without importing the app.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from script_analyzer.core.config import settings

# Create limiter instance with default key function
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
