"""
Main FastAPI Application
"""

import logging

from fastapi import FastAPI

from biodensity import __version__
from biodensity.routes.api_analysis import router as api_analysis_router
from biodensity.routes.api_health import router as api_health_router
from biodensity.utils.env import env_str

logging.basicConfig(
    level=env_str("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="bio-density", version=__version__)

app.include_router(api_health_router)
app.include_router(api_analysis_router)

logging.getLogger(__name__).info(f"bio-density {__version__} ready")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
