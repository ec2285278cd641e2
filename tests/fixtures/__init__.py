"""
Test fixtures for deterministic console tests.

This module provides:
- fake_coach: an in-memory coach service (FastAPI) reached through httpx.ASGITransport
- FakeChannel: a queue-backed PushChannel the test feeds frames into
"""

from .fake_channel import FakeChannel
from .fake_coach import FakeCoachState, create_fake_coach, fake_client, settle

__all__ = ["FakeChannel", "FakeCoachState", "create_fake_coach", "fake_client", "settle"]
