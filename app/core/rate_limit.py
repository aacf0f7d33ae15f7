from slowapi import Limiter
from slowapi.util import get_remote_address

# Shared so routers can decorate endpoints and app.main can register it
limiter = Limiter(key_func=get_remote_address)
