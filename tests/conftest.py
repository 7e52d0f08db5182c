"""Shared pytest fixtures"""

from io import StringIO

import pytest
from rich.console import Console

from hoptrace.logging import logger
from fakes import FakeClock


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_console():
    """Create a console that captures output"""
    output = StringIO()
    console = Console(file=output, width=120, highlight=False, color_system=None)
    console._output = output
    return console


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they don't outlive the test"""
    yield
    logger.handlers.clear()
