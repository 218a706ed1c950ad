# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/forge_sandbox

import shutil
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from forge_sandbox import __version__
from forge_sandbox.config import ForgeSandboxConfig
from forge_sandbox.exceptions import ForgeSandboxError, ValidationError
from forge_sandbox.models import (
    CompileAndTestRequest,
    CompileAndTestResponse,
    CompileForDeployRequest,
    CompileForDeployResponse,
    ErrorResponse,
)
from forge_sandbox.service import ForgeSandboxAsync
from forge_sandbox.utils.logger import logger


def get_sandbox(request: Request) -> ForgeSandboxAsync:
    sandbox: ForgeSandboxAsync = request.app.state.sandbox
    return sandbox


def _failure(endpoint: str, e: Exception) -> JSONResponse:
    if isinstance(e, ValidationError):
        return JSONResponse(status_code=400, content={"error": str(e)})
    if isinstance(e, ForgeSandboxError):
        logger.error(f"{endpoint} failed: {e}")
    else:
        logger.exception(f"{endpoint} failed unexpectedly: {e}")
    return JSONResponse(status_code=500, content=ErrorResponse(error=str(e)).model_dump(by_alias=True))


def create_app(config: ForgeSandboxConfig | None = None, sandbox: ForgeSandboxAsync | None = None) -> FastAPI:
    """Build the HTTP application.

    Args:
        config: Service configuration. Defaults to one read from the environment.
        sandbox: Optional pre-built service, mainly for tests.

    Returns:
        FastAPI: The configured application.
    """
    config = config or (sandbox.config if sandbox else ForgeSandboxConfig())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting forge sandbox service...")
        config.temp_root.mkdir(parents=True, exist_ok=True)
        if not config.template_dir.is_dir():
            logger.warning(f"Template directory not found: {config.template_dir}")
        if shutil.which(config.forge_binary) is None:
            logger.warning(f"forge binary {config.forge_binary!r} not found on PATH")
        yield
        logger.info("Shutting down forge sandbox service...")

    app = FastAPI(
        title="Forge Sandbox",
        description="Compiles and tests Solidity contracts in isolated Foundry workspaces",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.sandbox = sandbox or ForgeSandboxAsync(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Rejected malformed request to {request.url.path}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.get("/health")
    def health_check() -> dict[str, str | None]:
        """Liveness check reporting where the forge binary resolves."""
        return {
            "status": "ok",
            "service": "forge-sandbox",
            "forge": shutil.which(config.forge_binary),
        }

    @app.post(
        "/api/compile-and-test",
        response_model=CompileAndTestResponse,
        responses={400: {"description": "Missing contract or test code"}, 500: {"model": ErrorResponse}},
    )
    async def compile_and_test(
        body: CompileAndTestRequest, service: ForgeSandboxAsync = Depends(get_sandbox)
    ) -> Response | CompileAndTestResponse:
        """Build the submitted contract, run its tests and return per-test results."""
        try:
            return await service.compile_and_test(body.code, body.test_code)
        except Exception as e:
            return _failure("compile-and-test", e)

    @app.post(
        "/api/compile-for-deploy",
        response_model=CompileForDeployResponse,
        responses={400: {"description": "Missing contract code"}, 500: {"model": ErrorResponse}},
    )
    async def compile_for_deploy(
        body: CompileForDeployRequest, service: ForgeSandboxAsync = Depends(get_sandbox)
    ) -> Response | CompileForDeployResponse:
        """Build the submitted contract and return its ABI and bytecode."""
        try:
            return await service.compile_for_deploy(body.code)
        except Exception as e:
            return _failure("compile-for-deploy", e)

    return app
