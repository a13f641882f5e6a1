"""FastAPI application bootstrap and routing setup."""

import os
import logging
from fastapi import FastAPI
from termcolor import colored
from fastapi.middleware.cors import CORSMiddleware
from src.utility.logger import AppLogger
from src.handlers.error_handler import MapExceptions as me
from src.controller.visualize_controller import router as visualize_router

AppLogger.init(
    level=logging.INFO,
    log_to_file=os.getenv("LOG_TO_FILE", "true").lower() == "true",
)

app = FastAPI(title="Landscape Lighting Visualizer", version="0.1.0")
me.register_exception_handlers(app)
logger = AppLogger.get_logger(__name__)

mode = os.getenv("RUN_MODE", "actual")
logger.info(colored(f"Running in {mode} mode", "yellow"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(visualize_router)


@app.get("/", tags=["Health"])
def root():
    """Health check indicating API wiring and logger setup succeeded."""
    return {"status": "ok", "message": "Setup Successful", "mode": mode}


@app.get("/health", tags=["Health"])
def health_check():
    """Secondary health endpoint used by deployments and monitoring."""
    return {"status": "ok", "message": "FastAPI server running!", "mode": mode}
