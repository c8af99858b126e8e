"""Shared pytest fixtures for the csssource test suite."""

from __future__ import annotations

import pytest

from csssource.source import IdSequence, SourceFactory
from tests.helpers import SASS_MAPPINGS


@pytest.fixture
def factory():
    """A factory with its own id sequence, numbering from 1."""
    return SourceFactory(IdSequence())


@pytest.fixture
def sass_map():
    return {
        "version": 3,
        "sources": ["a.sass"],
        "names": [],
        "mappings": SASS_MAPPINGS,
    }
