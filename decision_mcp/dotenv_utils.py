"""
Load a .env file for the decision MCP services.

Searches the module directory first, then the project root.
"""
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_decision_mc_dotenv(module_dir: Optional[Path] = None) -> tuple[bool, list[Path]]:
    """Return (loaded, searched_paths). Existing environment variables win."""
    module_dir = module_dir or Path(__file__).parent
    candidates = [module_dir / ".env", module_dir.parent / ".env"]
    for path in candidates:
        if path.is_file():
            load_dotenv(path, override=False)
            return True, candidates
    return False, candidates
