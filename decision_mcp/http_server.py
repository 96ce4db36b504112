"""
HTTP server wrapper for the decision Monte Carlo MCP Server

Provides HTTP/JSON endpoints for MCP tool calls, the streamable HTTP MCP
transport, and the simulation endpoint used by the assumption-tuning UI.
"""
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Annotated, Any, Awaitable, Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import CallToolResult
from pydantic import BaseModel, Field, ValidationError

# Load .env file early
from decision_mcp.dotenv_utils import load_decision_mc_dotenv
_dotenv_loaded, _dotenv_paths = load_decision_mc_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from decision_engine.config import MIN_ITERATIONS, NUM_RUNS, TOOL_MAX_ITERATIONS
from decision_mcp.app import (
    SERVER_NAME,
    SERVER_VERSION,
    TOOL_DEFINITIONS,
    TOOL_HANDLERS,
    dispatch_tool,
    tool_definition_to_dict,
)
from decision_mcp.tool_models import AssumptionInput, DecisionModelName, VariableSpec
from sim_api.app import router as sim_router

SERVICE_NAME = "decision-mc-mcp"

HTTP_HOST = os.environ.get("DECISION_MC_HTTP_HOST", "127.0.0.1")
HTTP_PORT = int(os.environ.get("PORT") or os.environ.get("DECISION_MC_HTTP_PORT", "8001"))
MAX_BODY_BYTES = int(os.environ.get("DECISION_MC_MAX_BODY_BYTES", "1048576"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("DECISION_MC_CORS_ORIGINS", "").split(",")
    if origin.strip()
] or ["*"]

# POST routes whose body size is checked before the handler runs.
_BODY_LIMITED_PATHS = {"/mcp/tools/call", "/api/mcp", "/api/sim"}


def _body_too_large(request: Request) -> Optional[JSONResponse]:
    if request.method != "POST" or request.url.path not in _BODY_LIMITED_PATHS:
        return None
    declared = request.headers.get("content-length", "")
    if not declared.isdigit():
        return None
    if int(declared) > MAX_BODY_BYTES:
        logger.warning("Rejected %s body of %s bytes", request.url.path, declared)
        return JSONResponse(status_code=413, content={"detail": "Request body too large"})
    return None


class MCPToolCallRequest(BaseModel):
    tool: str
    arguments: dict[str, Any] = {}


class MCPToolCallResponse(BaseModel):
    content: list[dict[str, Any]]
    structuredContent: Optional[dict[str, Any]] = None
    error: Optional[dict[str, Any]] = None


def _tool_response(result: Any) -> MCPToolCallResponse:
    """Flatten a FastMCP call_tool result into {content, structuredContent, error}."""
    if isinstance(result, tuple) and len(result) == 2:
        result = result[0]
    if not isinstance(result, CallToolResult):
        blocks = result if isinstance(result, list) else [result]
        return MCPToolCallResponse(
            content=[{"text": getattr(block, "text", str(block))} for block in blocks]
        )

    content = [{"text": getattr(block, "text", "")} for block in result.content]
    structured = result.structuredContent
    error = None
    if result.isError:
        error = (structured or {}).get("error") or {
            "code": "TOOL_ERROR",
            "message": " ".join(item["text"] for item in content),
        }
    return MCPToolCallResponse(content=content, structuredContent=structured, error=error)


async def analyze_decision(
    decision_name: str,
    variables: dict[str, VariableSpec],
    model: DecisionModelName = "auto",
) -> CallToolResult:
    return await dispatch_tool(
        "analyze_decision",
        {
            "decision_name": decision_name,
            "variables": {name: spec.model_dump(exclude_none=True) for name, spec in variables.items()},
            "model": model,
        },
    )


async def run_decision_mc(
    assumptions: list[AssumptionInput],
    iterations: Annotated[int, Field(ge=MIN_ITERATIONS, le=TOOL_MAX_ITERATIONS)] = NUM_RUNS,
    threshold: float = 0.0,
    seed: Optional[int] = None,
) -> CallToolResult:
    arguments: dict[str, Any] = {
        "assumptions": [a.model_dump(exclude_none=True) for a in assumptions],
        "iterations": iterations,
        "threshold": threshold,
    }
    if seed is not None:
        arguments["seed"] = seed
    return await dispatch_tool("run_decision_mc", arguments)


_TOOL_FUNCTIONS = {
    "analyze_decision": analyze_decision,
    "run_decision_mc": run_decision_mc,
}

fastmcp_server = FastMCP(
    name=SERVER_NAME,
    instructions="Monte Carlo decision analysis: probability of success and sensitivity ranking",
    host=HTTP_HOST,
    port=HTTP_PORT,
    streamable_http_path="/",
    json_response=True,
    stateless_http=True,
)
for _definition in TOOL_DEFINITIONS:
    fastmcp_server.tool(
        name=_definition.name,
        title=_definition.title,
        description=_definition.description,
    )(_TOOL_FUNCTIONS[_definition.name])


@asynccontextmanager
async def _lifespan(app: FastAPI):
    async with fastmcp_server.session_manager.run():
        yield


app = FastAPI(
    title="Decision Monte Carlo MCP Server (HTTP)",
    description="HTTP wrapper for the decision Monte Carlo MCP interface",
    version=SERVER_VERSION,
    lifespan=_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Mcp-Session-Id"],
    expose_headers=["Mcp-Session-Id"],
)


@app.middleware("http")
async def limit_body_size(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    rejection = _body_too_large(request)
    if rejection is not None:
        return rejection
    return await call_next(request)


app.include_router(sim_router)


@app.get("/mcp/tools")
async def list_tools() -> dict[str, Any]:
    """List all available MCP tools."""
    tools = []
    for tool in await fastmcp_server.list_tools():
        entry = {"name": tool.name, "description": tool.description, "inputSchema": tool.inputSchema}
        if tool.title:
            entry["title"] = tool.title
        tools.append(entry)
    return {"tools": tools}


@app.post("/mcp/tools/call", response_model=MCPToolCallResponse)
async def call_tool(payload: MCPToolCallRequest) -> MCPToolCallResponse:
    """Call an MCP tool through the FastMCP registry."""
    if payload.tool not in TOOL_HANDLERS:
        return MCPToolCallResponse(
            content=[], error={"code": "INVALID_TOOL", "message": f"Unknown tool: {payload.tool}"}
        )
    try:
        result = await fastmcp_server.call_tool(payload.tool, payload.arguments)
    except Exception as e:
        if isinstance(e, ToolError) and isinstance(e.__cause__, ValidationError):
            logger.warning("Invalid arguments for tool %s: %s", payload.tool, e.__cause__)
            return MCPToolCallResponse(
                content=[], error={"code": "INVALID_ARGUMENTS", "message": str(e.__cause__)}
            )
        logger.error(f"Error calling tool {payload.tool}: {e}", exc_info=True)
        return MCPToolCallResponse(content=[], error={"code": "INTERNAL_ERROR", "message": str(e)})
    return _tool_response(result)


@app.get("/api/mcp")
def api_mcp_health() -> dict[str, Any]:
    return {"status": "healthy", "service": SERVICE_NAME}


_ERROR_STATUS = {"INVALID_ARGUMENTS": 400, "INTERNAL_ERROR": 500}


@app.post("/api/mcp")
async def api_mcp(request: Request) -> JSONResponse:
    """
    Minimal JSON tool endpoint: {"method": "tools/list" | "tools/call", "params": {...}}.

    Unknown methods and tool names answer 404 {"error": "Unknown method"}.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body", "isError": True})
    if not isinstance(body, dict):
        body = {}

    method = body.get("method")
    params = body.get("params") or {}

    if method == "tools/list":
        return JSONResponse(
            content={"tools": [tool_definition_to_dict(d) for d in TOOL_DEFINITIONS]}
        )

    if method == "tools/call" and isinstance(params, dict) and params.get("name") in TOOL_HANDLERS:
        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}
        result = await dispatch_tool(params["name"], arguments)
        if result.isError:
            error = (result.structuredContent or {}).get("error", {})
            status_code = _ERROR_STATUS.get(error.get("code"))
            if status_code is not None:
                return JSONResponse(
                    status_code=status_code,
                    content={"error": error.get("message", ""), "isError": True},
                )
        return JSONResponse(content=result.model_dump(mode="json", exclude_none=True))

    return JSONResponse(status_code=404, content={"error": "Unknown method"})


@app.get("/healthcheck")
def healthcheck() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
    }


# Mounted last so the /mcp/tools routes above take precedence.
app.mount("/mcp", fastmcp_server.streamable_http_app())


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting decision Monte Carlo MCP HTTP server on {HTTP_HOST}:{HTTP_PORT}")
    uvicorn.run("decision_mcp.http_server:app", host=HTTP_HOST, port=HTTP_PORT, reload=False)
