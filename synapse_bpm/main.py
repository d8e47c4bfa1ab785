"""
Synapse BPMN Designer - FastAPI Application
REST and WebSocket backend for the process designer, task list and admin dashboard
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from synapse_bpm.api import websocket
from synapse_bpm.api.routes import (
    admin,
    api_calls,
    bpmn,
    deployments,
    health,
    instances,
    integrations,
    tasks,
    workflows,
)
from synapse_bpm.config import settings
from synapse_bpm.core.exceptions import AppError
from synapse_bpm.database import init_db

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Starting %s...", settings.app_name)

    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")

    logger.info(f"API running on {settings.app_env} environment")
    logger.info("=" * 50)
    yield
    logger.info("Shutting down %s...", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Backend API for the Synapse BPMN designer",
    version="1.0.0",
    debug=settings.app_debug,
    lifespan=lifespan,
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request data", "errors": errors},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
async def root() -> dict:
    return {
        "name": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.utcnow().isoformat(),
    }


prefix = settings.api_prefix

app.include_router(health.router, prefix=prefix, tags=["Health"])
app.include_router(workflows.router, prefix=f"{prefix}/workflows", tags=["Workflows"])
app.include_router(instances.router, prefix=f"{prefix}/workflow-instances", tags=["Workflow Instances"])
app.include_router(tasks.router, prefix=f"{prefix}/tasks", tags=["Tasks"])
app.include_router(integrations.router, prefix=f"{prefix}/integrations", tags=["Integrations"])
app.include_router(api_calls.router, prefix=f"{prefix}/api-calls", tags=["API Calls"])
app.include_router(deployments.router, prefix=f"{prefix}/deployments", tags=["Deployments"])
app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["Admin"])
app.include_router(bpmn.router, prefix=f"{prefix}/bpmn", tags=["BPMN"])
app.include_router(websocket.router, tags=["WebSocket"])
