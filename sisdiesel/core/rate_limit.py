# sisdiesel/core/rate_limit.py
from slowapi import Limiter
from slowapi.util import get_remote_address
from sisdiesel.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=True)
LOGIN_LIMIT = settings.login_rate_limit
