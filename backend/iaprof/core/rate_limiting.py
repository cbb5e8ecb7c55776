from slowapi import Limiter
from slowapi.util import get_remote_address

from .settings import settings

# Limite por IP; os limites concretos ficam em settings
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
