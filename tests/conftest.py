"""
Shared pytest fixtures for apigate tests.

This module provides:
- A dispatcher over the handlers in ``tests/_support/handlers.py``
- Sessions at a chosen access level
- Helpers to dispatch and read back a buffered response
- Log context cleanup between tests

Usage:
    def test_something(dispatcher, session, call):
        response = call("calc", "add", a="2", b="3")
        assert response.body == b"5"
"""

from collections.abc import Callable, Generator

import pytest

from apigate import BufferedResponse, Dispatcher, SessionState, SimpleRequest
from apigate.core.logging import clear_context
from apigate.execution.executors import InlineExecutor
from tests._support.handlers import HANDLERS, Blocking, Spy


@pytest.fixture(autouse=True)
def _clean_state() -> Generator[None, None, None]:
    """Reset log context and handler class counters around each test."""
    clear_context()
    Spy.calls = 0
    Spy.instances = 0
    Blocking.reset()
    yield
    Blocking.release.set()
    clear_context()


@pytest.fixture
def dispatcher() -> Generator[Dispatcher, None, None]:
    api = Dispatcher(HANDLERS, name="tests.api")
    yield api
    api.close()


@pytest.fixture
def inline_dispatcher() -> Generator[Dispatcher, None, None]:
    """Dispatcher whose async operations run on the calling thread."""
    api = Dispatcher(HANDLERS, name="tests.inline", executor=InlineExecutor())
    yield api
    api.close()


@pytest.fixture
def session(dispatcher: Dispatcher) -> SessionState:
    """A session granted access level 0 on ``dispatcher``."""
    state = SessionState("session-1")
    dispatcher.set_access_level(state, 0)
    return state


@pytest.fixture
def call(dispatcher: Dispatcher, session: SessionState) -> Callable[..., BufferedResponse]:
    """Dispatch synchronously-completing requests and wait for the response."""

    def _call(class_id: str, method_id: str, *, method: str = "GET", state: SessionState | None = None, **params: str):
        response = BufferedResponse()
        request = SimpleRequest(params, state or session, method=method)
        dispatcher.dispatch(class_id, method_id, request, response)
        return response.wait(timeout=5)

    return _call
