"""
USDT Payout Gateway API entry point

    uvicorn main:app --reload
"""

import uvicorn

from app.core.config import settings
from app.main import app

if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
