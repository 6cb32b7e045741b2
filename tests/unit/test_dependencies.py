"""
Unit tests for FastAPI dependency injection.
"""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.engine import Engine

from car_rental.dependencies import get_db_engine


@pytest.mark.unit
def test_get_db_engine_dependency() -> None:
    """Test that get_db_engine returns the engine instance."""
    engine = next(get_db_engine())

    assert engine is not None
    assert isinstance(engine, Engine)


@pytest.mark.unit
def test_get_db_engine_connects() -> None:
    """Test that the provided engine can run a query."""
    engine = next(get_db_engine())

    with engine.connect() as conn:
        assert conn.execute(text("SELECT 1")).scalar() == 1


@pytest.mark.unit
def test_dependency_injection_can_be_overridden() -> None:
    """Test that dependency can be overridden for testing."""
    app = FastAPI()

    @app.get("/test")
    def test_endpoint(engine: Engine = Depends(get_db_engine)) -> dict[str, str]:
        """Test endpoint."""
        return {"engine_name": engine.name}

    mock_engine = Mock(spec=Engine)
    mock_engine.name = "mock_engine"
    app.dependency_overrides[get_db_engine] = lambda: mock_engine

    response = TestClient(app).get("/test")

    assert response.status_code == 200
    assert response.json() == {"engine_name": "mock_engine"}


@pytest.mark.unit
def test_dependency_injection_provides_same_engine() -> None:
    """Test that multiple calls get the same engine instance."""
    engine1 = next(get_db_engine())
    engine2 = next(get_db_engine())

    assert engine1 is engine2
