"""
Shared fixtures for the test suite.
"""

import pytest

from stache.compiler.sink import CodeSink
from stache.core.config import CompilerSettings
from stache.core.engine import Engine


@pytest.fixture
def settings():
    return CompilerSettings()


@pytest.fixture
def engine(settings):
    """Engine that ignores any stache.yaml in the working directory."""
    return Engine(settings=settings)


@pytest.fixture
def sink():
    return CodeSink()
