#!/usr/bin/env python3
"""
aihttp_server.py
Backend for the AI HTTP tester: request relay plus AI analysis endpoints.
"""
from __future__ import annotations
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models.pydantic_models import AnalyzeRequest, ConnectionTestRequest, ErrorBody, ProxyRequest
from security_agents import ModelEndpointError, agent_runner, analyze_with_ai
from tools.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from tools.proxy import ProxyError, send_http_request

# Set up basic logging - the CLI overrides this with a file log
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# Suppress verbose HTTP logs by default
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AI HTTP Tester",
    description="Relay HTTP requests and ask a local or hosted model about them",
    version="1.0.0",
)

cors_origins = ["*"] if CORS_ORIGINS == "*" else [o.strip() for o in CORS_ORIGINS.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(content=body.model_dump(), status_code=status_code)


@app.get("/api/health")
async def health():
    return {"status": "ok", "message": "AI HTTP Tester Backend Running"}


@app.post("/api/send-request")
async def send_request(request: ProxyRequest):
    try:
        resp = await send_http_request(request)
    except ProxyError as e:
        return _error(e.status_code, e.to_body())
    logger.info("[Proxy] Response: %s %s", resp.status, resp.status_text)
    return JSONResponse(content=resp.to_wire())


@app.post("/api/ai-analyze")
async def ai_analyze(request: AnalyzeRequest):
    if not request.prompt.strip():
        return _error(400, ErrorBody(
            error="No prompt provided",
            message="Please enter a question or instruction for the AI",
            details="The prompt field is empty",
        ))
    try:
        resp = await analyze_with_ai(request)
    except ModelEndpointError as e:
        return _error(e.status_code, e.to_body())
    return JSONResponse(content=resp.to_wire())


@app.post("/api/ai-test")
async def ai_test(request: ConnectionTestRequest):
    """Check that an endpoint, model and API key can produce a reply."""
    try:
        result = await agent_runner.test_connection(
            request.type, endpoint=request.endpoint, model=request.model, api_key=request.api_key
        )
    except ModelEndpointError as e:
        logger.warning("[AI] Connection test failed: %s", e.message)
        return _error(e.status_code, e.to_body())
    return JSONResponse(content=result.to_wire())


def main(host: str = SERVER_HOST, port: int = SERVER_PORT):
    """Run the server."""
    logger.info("🚀 AI HTTP Tester backend on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
