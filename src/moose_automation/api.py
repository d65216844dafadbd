"""
FastAPI application.

Exposes the automation gateway over HTTP:
    POST    {prefix}/validate-credentials
    POST    {prefix}/force-sync
    OPTIONS {prefix}/validate-credentials, {prefix}/force-sync
    GET     {prefix}/health
    GET     {prefix}/test
    GET     /

Run with:
    moose-automation serve
    uvicorn moose_automation.api:create_app --factory --port 5000
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .config import ServiceConfig
from .gateway import AutomationGateway, create_gateway
from .models import WorkflowResult

logger = logging.getLogger(__name__)

SERVICE_BANNER = "Moose Browser Automation Service is running"


async def read_json_body(request: Request) -> Any:
    """Decode the request body, returning None when absent or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Request body is not valid JSON")
        return None


def to_response(result: WorkflowResult) -> JSONResponse:
    """HTTP status mirrors the result's status code."""
    return JSONResponse(status_code=int(result.status_code), content=result.to_response())


def get_gateway(request: Request) -> AutomationGateway:
    return request.app.state.gateway


def create_router(prefix: str) -> APIRouter:
    """Build the automation routes under the given prefix."""
    router = APIRouter(prefix=prefix, tags=["browser-automation"])

    @router.options("/validate-credentials")
    async def preflight_validate_credentials():
        return Response(status_code=200)

    @router.post("/validate-credentials")
    async def validate_credentials(request: Request):
        body = await read_json_body(request)
        result = await get_gateway(request).validate_credentials(body)
        return to_response(result)

    @router.options("/force-sync")
    async def preflight_force_sync():
        return Response(status_code=200)

    @router.post("/force-sync")
    async def force_sync(request: Request):
        body = await read_json_body(request)
        result = await get_gateway(request).force_sync(body)
        return to_response(result)

    @router.get("/health")
    async def health(request: Request):
        result = await get_gateway(request).health()
        return to_response(result)

    @router.get("/test")
    async def test(request: Request):
        return get_gateway(request).diagnostics()

    return router


def create_app(
    config: Optional[ServiceConfig] = None,
    gateway: Optional[AutomationGateway] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Service configuration (uses env if None)
        gateway: Prebuilt gateway (built from config if None)

    Returns:
        FastAPI app whose shutdown releases the shared browser
    """
    config = config or ServiceConfig.from_env()
    gateway = gateway or create_gateway(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(SERVICE_BANNER)
        logger.info(f"Routes mounted under {config.api_prefix or '/'}")
        if not config.icl_url:
            logger.warning("ICL_URL is not set; requests must supply iclUrl")
        yield
        logger.info("Shutting down, releasing browser")
        await app.state.gateway.shutdown()

    app = FastAPI(
        title="Moose Browser Automation Service",
        description="Validates fraternal-unit credentials and downloads roster exports",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.gateway = gateway
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
        return to_response(WorkflowResult.internal_error("Internal server error"))

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return SERVICE_BANNER

    app.include_router(create_router(config.api_prefix))

    return app
