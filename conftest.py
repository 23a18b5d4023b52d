"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before tests run
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def _reset_expiry_run_flag():
    """A test that dies mid-run must not make the next run look like an overlap."""
    from core.notifications import expiry

    expiry._run_in_progress = False
    yield
    expiry._run_in_progress = False
