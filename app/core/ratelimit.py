# File: app/core/ratelimit.py
# Project: lapor-backend

from slowapi import Limiter
from slowapi.util import get_remote_address

# per client address; only report submission is decorated
limiter = Limiter(key_func=get_remote_address, headers_enabled=False)
