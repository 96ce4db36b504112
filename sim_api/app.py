"""
Simulation endpoint for the assumption-tuning UI.

POST /api/sim accepts loosely-typed JSON and never rejects it: the body is
clamped into safe ranges before the probability run. The router is shared
with decision_mcp.http_server; this module also serves it standalone.
"""
import asyncio
import json
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from decision_engine import __version__, coerce_sim_request, run_assumption_simulation

load_dotenv(override=False)

logger = logging.getLogger(__name__)

SERVICE_NAME = "decision-mc-engine"

router = APIRouter()


@router.post("/api/sim")
async def simulate(request: Request) -> dict[str, Any]:
    """Run the probability simulation for a list of assumptions."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("Unparseable simulation body; treating as empty")
        body = {}
    sim_request = coerce_sim_request(body)
    result = await asyncio.to_thread(run_assumption_simulation, sim_request)
    return result.to_dict()


app = FastAPI(
    title="Decision Monte Carlo Engine",
    description="Probability-of-success simulation over weighted assumptions",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(router)


@app.get("/healthcheck")
def healthcheck() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    host = os.environ.get("DECISION_MC_HTTP_HOST", "127.0.0.1")
    port = int(os.environ.get("PORT") or os.environ.get("DECISION_MC_ENGINE_PORT", "8000"))
    logger.info(f"Starting decision Monte Carlo engine on {host}:{port}")
    uvicorn.run("sim_api.app:app", host=host, port=port, reload=False)
