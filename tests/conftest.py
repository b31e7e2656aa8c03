"""
Pytest fixtures for the conversation player test suite.

Provides fake collaborators, a virtual clock, and a ready-made controller.
"""

import pytest

from config import Settings
from core.conversation.orchestration import ConversationController
from core.conversation.pipeline import VirtualClockScheduler

from fakes import FakeEvaluator, FakeProvider, FakeViewport, RecordingHostChannel


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def player_settings():
    """Default pacing, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return VirtualClockScheduler()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def evaluator():
    return FakeEvaluator()


@pytest.fixture
def host():
    return RecordingHostChannel()


@pytest.fixture
def viewport(clock):
    return FakeViewport(clock)


@pytest.fixture
def controller(provider, evaluator, host, viewport, clock, player_settings):
    return ConversationController(provider, evaluator, host, viewport, clock, player_settings)


@pytest.fixture
def ready_controller(controller, clock):
    """Controller whose first card has been shown and settled."""
    controller.initialize()
    clock.run_until_idle()
    return controller
