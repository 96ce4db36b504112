"""
Decision Monte Carlo MCP Server

Exposes the decision engine to conversational agents over the Model Context
Protocol. Both tools run the engine in-process; run_decision_mc can instead
relay to a remote simulation endpoint when ENGINE_URL is set.
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import ValidationError

from decision_engine import (
    Assumption,
    DecisionModelError,
    SimRequest,
    analyze_decision,
    run_assumption_simulation,
)
from decision_engine.config import MIN_ITERATIONS, NUM_RUNS, TOOL_MAX_ITERATIONS

# Load .env file early
from decision_mcp.dotenv_utils import load_decision_mc_dotenv
_dotenv_loaded, _dotenv_paths = load_decision_mc_dotenv(Path(__file__).parent)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
if not _dotenv_loaded:
    logger.debug(
        "No .env file found; searched: %s",
        ", ".join(str(path) for path in _dotenv_paths),
    )

from decision_mcp.tool_models import (
    AnalyzeDecisionOutput,
    AnalyzeDecisionRequest,
    ErrorDetail,
    RunDecisionMcOutput,
    RunDecisionMcRequest,
)

SERVER_NAME = "decision-mc"
SERVER_VERSION = "1.0.0"

ENGINE_TIMEOUT_SECONDS = float(os.environ.get("DECISION_MC_ENGINE_TIMEOUT_SECONDS", "30"))

# MCP Server setup
mcp_server = Server(SERVER_NAME)


def get_engine_url() -> Optional[str]:
    """Remote simulation endpoint for run_decision_mc, or None to run in-process."""
    value = os.environ.get("ENGINE_URL", "").strip()
    return value or None


# Output schemas for MCP tools.
ERROR_SCHEMA = ErrorDetail.model_json_schema()
ERROR_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {"error": ERROR_SCHEMA},
    "required": ["error"],
}
ANALYZE_DECISION_OUTPUT_SCHEMA = {
    "oneOf": [ERROR_RESPONSE_SCHEMA, AnalyzeDecisionOutput.model_json_schema()]
}
RUN_DECISION_MC_OUTPUT_SCHEMA = {
    "oneOf": [ERROR_RESPONSE_SCHEMA, RunDecisionMcOutput.model_json_schema()]
}

ANALYZE_DECISION_INPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "decision_name": {"type": "string"},
        "variables": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "base": {"type": "number"},
                    "min": {"type": "number"},
                    "max": {"type": "number"},
                    "label": {"type": "string"},
                },
                "required": ["base", "min", "max"],
            },
        },
        "model": {
            "type": "string",
            "enum": ["auto", "hiring", "additive"],
            "default": "auto",
            "description": (
                "Outcome formula. 'hiring' = revenue from projects minus loaded salary; "
                "'additive' = sum of all variables; 'auto' picks hiring when all its "
                "variables are present."
            ),
        },
    },
    "required": ["decision_name", "variables"],
}
RUN_DECISION_MC_INPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "iterations": {
            "type": "integer",
            "minimum": MIN_ITERATIONS,
            "maximum": TOOL_MAX_ITERATIONS,
            "default": NUM_RUNS,
        },
        "threshold": {"type": "number", "default": 0},
        "assumptions": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "mean": {"type": "number"},
                    "std": {"type": "number", "minimum": 0},
                    "weight": {"type": "number", "minimum": 0},
                    "direction": {"type": "string", "enum": ["positive", "negative"]},
                    "enabled": {"type": "boolean"},
                },
                "required": ["name", "mean", "std", "weight", "direction", "enabled"],
            },
        },
        "seed": {"type": "integer"},
    },
    "required": ["assumptions"],
}


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any]
    output_schema: Optional[dict[str, Any]] = None
    title: Optional[str] = None


TOOL_DEFINITIONS = [
    ToolDefinition(
        name="analyze_decision",
        description=(
            "Analyze decisions using Monte Carlo simulation. Use when user discusses "
            "hiring, investments, or any decision with uncertainty."
        ),
        input_schema=ANALYZE_DECISION_INPUT_SCHEMA,
        output_schema=ANALYZE_DECISION_OUTPUT_SCHEMA,
    ),
    ToolDefinition(
        name="run_decision_mc",
        title="Run decision Monte Carlo",
        description=(
            "Runs a Monte Carlo simulation for a decision based on assumptions "
            "(mean/std/weight/direction) and returns probability of success."
        ),
        input_schema=RUN_DECISION_MC_INPUT_SCHEMA,
        output_schema=RUN_DECISION_MC_OUTPUT_SCHEMA,
    ),
]


def tool_definition_to_dict(definition: ToolDefinition) -> dict[str, Any]:
    entry = {
        "name": definition.name,
        "description": definition.description,
        "inputSchema": definition.input_schema,
    }
    if definition.title:
        entry["title"] = definition.title
    return entry


def _error_result(code: str, message: str) -> CallToolResult:
    response = {"error": {"code": code, "message": message}}
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(response))],
        structuredContent=response,
        isError=True,
    )


# MCP Tool implementations
@mcp_server.list_tools()
async def handle_list_tools() -> list[Tool]:
    """List all available MCP tools."""
    return [
        Tool(
            name=definition.name,
            title=definition.title,
            description=definition.description,
            outputSchema=definition.output_schema,
            inputSchema=definition.input_schema,
        )
        for definition in TOOL_DEFINITIONS
    ]


@mcp_server.call_tool()
async def handle_call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
    """Handle tool calls."""
    return await dispatch_tool(name, arguments)


async def dispatch_tool(name: str, arguments: Optional[dict[str, Any]]) -> CallToolResult:
    """Run a tool by name, converting every failure into an error result."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return _error_result("INVALID_TOOL", f"Unknown tool: {name}")
    try:
        return await handler(arguments or {})
    except (ValidationError, DecisionModelError) as e:
        logger.warning("Invalid arguments for tool %s: %s", name, e)
        return _error_result("INVALID_ARGUMENTS", str(e))
    except Exception as e:
        logger.error(f"Error handling tool {name}: {e}", exc_info=True)
        return _error_result("INTERNAL_ERROR", str(e))


async def handle_analyze_decision(arguments: dict[str, Any]) -> CallToolResult:
    """Handle analyze_decision"""
    req = AnalyzeDecisionRequest(**arguments)
    variables = {
        name: spec.model_dump(exclude_none=True) for name, spec in req.variables.items()
    }
    analysis = await asyncio.to_thread(
        analyze_decision,
        req.decision_name,
        variables,
        req.model,
    )
    return CallToolResult(
        content=[TextContent(type="text", text=analysis.summary)],
        structuredContent=analysis.to_dict(),
        isError=False,
    )


async def handle_run_decision_mc(arguments: dict[str, Any]) -> CallToolResult:
    """Handle run_decision_mc"""
    req = RunDecisionMcRequest(**arguments)
    engine_url = get_engine_url()
    if engine_url:
        return await relay_to_engine(engine_url, req)

    sim_request = SimRequest(
        assumptions=[
            Assumption(
                id=a.id,
                name=a.name,
                mean=a.mean,
                std=a.std,
                weight=a.weight,
                direction=a.direction,
                enabled=a.enabled,
            )
            for a in req.assumptions
        ],
        iterations=req.iterations,
        threshold=req.threshold,
        seed=req.seed,
    )
    result = await asyncio.to_thread(run_assumption_simulation, sim_request)
    return CallToolResult(
        content=[TextContent(type="text", text="Simulation complete.")],
        structuredContent=result.to_dict(),
        isError=False,
    )


async def relay_to_engine(engine_url: str, req: RunDecisionMcRequest) -> CallToolResult:
    """Forward a run_decision_mc request to a remote simulation endpoint."""
    payload = req.model_dump(mode="json", exclude_none=True)
    try:
        async with httpx.AsyncClient(timeout=ENGINE_TIMEOUT_SECONDS) as client:
            response = await client.post(engine_url, json=payload)
    except httpx.HTTPError as e:
        logger.error("Engine request to %s failed: %s", engine_url, e, exc_info=True)
        return _error_result("ENGINE_UNREACHABLE", f"Engine unreachable: {e}")

    if response.is_error:
        logger.warning("Engine returned %s for %s", response.status_code, engine_url)
        message = f"Engine error ({response.status_code}): {response.text}"
        return CallToolResult(
            content=[TextContent(type="text", text=message)],
            structuredContent={"error": {"code": "ENGINE_ERROR", "message": message}},
            isError=True,
        )

    try:
        data = response.json()
    except json.JSONDecodeError as e:
        return _error_result("ENGINE_ERROR", f"Engine returned invalid JSON: {e}")
    return CallToolResult(
        content=[TextContent(type="text", text="Simulation complete.")],
        structuredContent=data,
        isError=False,
    )


TOOL_HANDLERS = {
    "analyze_decision": handle_analyze_decision,
    "run_decision_mc": handle_run_decision_mc,
}


async def main():
    """Main entry point for MCP server."""
    logger.info("Starting decision Monte Carlo MCP Server...")
    if get_engine_url():
        logger.info("Relaying run_decision_mc to %s", get_engine_url())

    # Run MCP server over stdio
    async with stdio_server() as streams:
        await mcp_server.run(
            streams[0],
            streams[1],
            mcp_server.create_initialization_options()
        )


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
