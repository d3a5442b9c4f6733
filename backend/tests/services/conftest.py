"""Service test fixtures: FastAPI test client with a fake tree provider.

Invariants:
    - Every test starts and ends with an empty in-memory session registry
    - get_tree_provider dependency overridden with a FakeTreeProvider

Design Decisions:
    - httpx ASGITransport: requests run on the test's event loop, so expansion
      tasks created by routes can be awaited from the test
"""

import pytest
from httpx import ASGITransport, AsyncClient

from noesis.api.routes import tree_sessions
from noesis.api.routes.tree_sessions import get_tree_provider
from noesis.core.knowledge_tree import KnowledgeTree
from noesis.main import app
from tests.services.fake_provider import FakeTreeProvider, leaf


@pytest.fixture
def fake_provider():
    return FakeTreeProvider(
        tree=KnowledgeTree(
            topic="X", description="d",
            subtopics=(leaf("A", "a"), leaf("B", "b")),
        ),
        children={"A": (leaf("A1"), leaf("A2"))},
    )


@pytest.fixture
async def client(fake_provider):
    """FastAPI test client with the provider dependency overridden."""
    app.dependency_overrides[get_tree_provider] = lambda: fake_provider

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    tree_sessions.close_all_sessions()
