"""Shared pytest fixtures for dialectQL unit and integration tests."""
from __future__ import annotations

import pytest

from dialectql import DialectDescriptor
from dialectql.dialects import hsqldb, vertica


@pytest.fixture(scope="session")
def hsqldb_dialect() -> DialectDescriptor:
    """HSQLDB as registered (CTEs disabled)."""
    return hsqldb.DESCRIPTOR


@pytest.fixture(scope="session")
def hsqldb_ctes() -> DialectDescriptor:
    """HSQLDB with CTEs turned back on."""
    return hsqldb.build_descriptor(enable_ctes=True)


@pytest.fixture(scope="session")
def vertica_dialect() -> DialectDescriptor:
    return vertica.DESCRIPTOR


@pytest.fixture(scope="session")
def default_dialect() -> DialectDescriptor:
    """All defaults: every operator native, no case folding."""
    return DialectDescriptor(name="default")
