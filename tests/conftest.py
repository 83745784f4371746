"""Shared pytest fixtures for test modules."""

import sqlite3
from collections.abc import Generator

import pytest

from fantasy_football_manager.db.connection import create_connection


@pytest.fixture
def conn() -> Generator[sqlite3.Connection]:
    """In-memory database with migrations applied.

    Opened with ``check_same_thread=False`` because the services reach the
    repos through ``asyncio.to_thread``.
    """
    connection = create_connection(":memory:", check_same_thread=False)
    yield connection
    connection.close()
