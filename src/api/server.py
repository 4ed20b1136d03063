#!/usr/bin/env python
"""FastAPI server for the Pixshop photo editor backend."""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import shutdown_services
from api.routers import core, images
from utils.config import load_config, validate_config
from utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    for problem in validate_config(load_config()):
        logger.warning("configuration problem", problem=problem)
    yield
    await shutdown_services()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title="Pixshop API", version="1.0.0", lifespan=lifespan)

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],  # Vite default port
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(core.router)
    app.include_router(images.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = load_config()
    setup_logging(config["log_level"], json_output=config["log_json"])
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
