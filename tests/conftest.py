"""
Pytest fixtures for RiskViz tests. In-memory store by default; CSV store on a tmp path.
"""

from __future__ import annotations

import pytest

from riskviz_dashboard.config import ServerConfig


@pytest.fixture
def memory_config():
    return ServerConfig(storage_backend="memory", middleware_set=("request_log",))


@pytest.fixture
def csv_config(tmp_path):
    return ServerConfig(storage_backend="csv", data_dir=tmp_path / "data", middleware_set=())


@pytest.fixture
def context(memory_config):
    from riskviz_dashboard.api.server import build_context

    return build_context(memory_config)


@pytest.fixture
def store(context):
    return context.store


@pytest.fixture
def client(context):
    """FastAPI TestClient over a freshly built server context."""
    from fastapi.testclient import TestClient

    with TestClient(context.app) as test_client:
        yield test_client


@pytest.fixture
def valid_response():
    return {
        "respondent_id": "R-001",
        "location": "North District",
        "category": "Health",
        "timeline": "Phase 1",
        "answers": {"q1": "yes", "q2": 4, "q3": ["a", "b"]},
    }
