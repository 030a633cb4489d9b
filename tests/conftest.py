from typing import Callable, Dict, Optional, Tuple, Union
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from debatecards.main import app

Outcome = Union[Tuple[int, Optional[str]], Tuple[int, Optional[str], dict], Exception]


def fake_response(status_code: int, url: str, headers: Optional[dict] = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.url = url
    resp.headers = headers or {}
    return resp


def routed_session(routes: Dict[Tuple[str, str], Outcome], default: Outcome = (404, None)) -> MagicMock:
    """Session double whose `request` answers by (METHOD, url).

    An outcome is `(status, final_url)`, `(status, final_url, headers)` or an exception
    instance to raise. A final_url of None echoes the requested url.
    """
    session = MagicMock()
    session.headers = {}

    def _request(method, url, **kwargs):
        outcome = routes.get((method, url), default)
        if isinstance(outcome, Exception):
            raise outcome
        status, final_url, *rest = outcome
        return fake_response(status, final_url or url, rest[0] if rest else None)

    session.request.side_effect = _request
    return session


@pytest.fixture
def make_session() -> Callable[..., MagicMock]:
    return routed_session


@pytest.fixture
def client():
    """Create test client"""
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
