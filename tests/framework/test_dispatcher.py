"""
Tests for the dispatcher state machine.

Tests verify:
- Routing, authorization and binding failures become one 409 response
- Handler code never runs when authorization fails
- One handler instance per session and handler type
- Lock groups reject, never queue, a concurrent invocation
- Asynchronous operations return before the operation finishes
"""

import json
import threading

import pytest

from apigate import BufferedResponse, Dispatcher, SessionState, SimpleRequest
from apigate.core.errors import AccessDeniedError, AsyncBusyError, InvocationError
from apigate.execution.executors import InlineExecutor
from tests._support.handlers import HANDLERS, Blocking, Spy


class TestHappyPath:
    def test_calc_add(self, call):
        response = call("calc", "add", a="2", b="3")
        assert response.status == 200
        assert json.loads(response.body) == 5
        assert response.media_type == "application/json"

    def test_optional_absent(self, call):
        assert json.loads(call("calc", "greet").body) == "hello anonymous"

    def test_optional_present(self, call):
        assert json.loads(call("calc", "greet", name="ada").body) == "hello ada"

    def test_static_operation(self, call, dispatcher, session):
        assert json.loads(call("calc", "version").body) == "1.0"
        assert dispatcher.instances.get_instance(HANDLERS["calc"], session, create_if_missing=False) is None

    def test_void_result_is_null(self, call):
        response = call("intro", "raw")
        assert response.status == 200
        assert response.body == b'"raw"null'

    def test_constructor_failure_is_conflict(self, call):
        response = call("broken", "anything")
        assert response.is_error
        assert response.status == 409

    def test_http_method(self, call):
        assert call("calc", "store", method="POST", value="v").status == 200


class TestRejections:
    @pytest.mark.parametrize(
        "class_id, method_id, params, message",
        [
            ("nope", "add", {}, "Class not found."),
            ("calc", "sub", {}, "Method not found."),
            ("calc", "helper", {}, "Api method not available."),
            ("calc", "__init__", {}, "Method not found."),
            ("calc", "add", {"a": "1"}, "Missing parameter: b"),
            ("calc", "add", {"a": "x", "b": "1"}, "Cannot convert 'x' to int"),
            ("calc", "fail", {}, "fail failed: boom"),
        ],
    )
    def test_conflict_response(self, call, class_id, method_id, params, message):
        response = call(class_id, method_id, **params)
        assert response.status == 409
        assert response.error_message == message
        assert response.body == b""

    def test_wrong_http_method(self, call):
        response = call("calc", "store", value="v")
        assert response.status == 409
        assert response.error_message == "Api method not available."

    def test_access_denied_never_invokes(self, call):
        response = call("spy", "secret")
        assert response.status == 409
        assert response.error_message == "Access denied."
        assert Spy.calls == 0

    def test_no_access_by_default(self, dispatcher):
        response = BufferedResponse()
        dispatcher.dispatch("calc", "add", SimpleRequest({"a": "1", "b": "1"}), response)
        assert response.wait(1).error_message == "Access denied."

    def test_unknown_class_never_binds(self, dispatcher, session, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("binder reached")

        monkeypatch.setattr(dispatcher.binder, "bind", fail)
        response = BufferedResponse()
        dispatcher.dispatch("nope", "add", SimpleRequest({}, session), response)
        assert response.wait(1).status == 409

    def test_elevated_access(self, call, dispatcher, session):
        dispatcher.set_access_level(session, 5)
        response = call("spy", "secret")
        assert json.loads(response.body) == "secret"
        assert Spy.calls == 1


class TestSessionInstances:
    def test_state_accumulates_per_session(self, call):
        call("calc", "accumulate", n="2")
        assert json.loads(call("calc", "accumulate", n="3").body) == 5

    def test_sessions_are_isolated(self, call, dispatcher):
        other = SessionState("session-2")
        dispatcher.set_access_level(other, 0)
        call("calc", "accumulate", n="2")
        assert json.loads(call("calc", "accumulate", n="10", state=other).body) == 10

    def test_one_instance_per_session(self, call, dispatcher):
        call("spy", "touch")
        call("spy", "touch")
        assert Spy.instances == 1

    def test_handler_can_grant_access(self, call, dispatcher, session):
        call("admin", "elevate", level="7")
        assert dispatcher.get_access_level(session) == 7

    def test_contextual_instance_visible_after_use(self, call):
        assert json.loads(call("intro", "has_calculator").body) is False
        call("calc", "add", a="1", b="1")
        assert json.loads(call("intro", "has_calculator").body) is True


class TestLockGroups:
    def test_concurrent_invocation_is_rejected(self, dispatcher, session):
        first = BufferedResponse()
        worker = threading.Thread(
            target=dispatcher.dispatch,
            args=("block", "run_locked", SimpleRequest({}, session), first),
        )
        worker.start()
        assert Blocking.started.wait(5)

        second = BufferedResponse()
        dispatcher.dispatch("block", "run_locked", SimpleRequest({}, session), second)
        assert second.wait(1).status == 409
        assert second.error_message == "Async task already running."

        Blocking.release.set()
        worker.join(5)
        assert json.loads(first.wait(1).body) == "done"

    def test_lock_released_after_completion(self, dispatcher, session):
        Blocking.release.set()
        for _ in range(2):
            response = BufferedResponse()
            dispatcher.dispatch("block", "run_locked", SimpleRequest({}, session), response)
            assert json.loads(response.wait(5).body) == "done"
        assert not dispatcher.locks.is_locked(session, "job")

    def test_other_sessions_not_blocked(self, dispatcher, session):
        first = BufferedResponse()
        worker = threading.Thread(
            target=dispatcher.dispatch,
            args=("block", "run_locked", SimpleRequest({}, session), first),
        )
        worker.start()
        assert Blocking.started.wait(5)

        other = SessionState("session-2")
        dispatcher.set_access_level(other, 0)
        second = BufferedResponse()
        threading.Thread(
            target=dispatcher.dispatch,
            args=("block", "run_locked", SimpleRequest({}, other), second),
        ).start()

        Blocking.release.set()
        worker.join(5)
        assert json.loads(second.wait(5).body) == "done"


class TestAsync:
    def test_returns_before_operation_finishes(self, dispatcher, session):
        response = BufferedResponse()
        dispatcher.dispatch("block", "run_async", SimpleRequest({}, session), response)

        assert Blocking.started.wait(5)
        assert not response.done.done()

        Blocking.release.set()
        assert json.loads(response.wait(5).body) == "async done"

    def test_async_busy(self, dispatcher, session):
        first = BufferedResponse()
        dispatcher.dispatch("block", "run_async", SimpleRequest({}, session), first)
        assert Blocking.started.wait(5)

        second = BufferedResponse()
        dispatcher.dispatch("block", "run_async", SimpleRequest({}, session), second)
        assert second.wait(5).error_message == "Async task already running."

        Blocking.release.set()
        assert first.wait(5).status == 200

    def test_inline_executor(self, inline_dispatcher):
        session = SessionState("s")
        inline_dispatcher.set_access_level(session, 0)
        response = BufferedResponse()
        inline_dispatcher.dispatch("block", "quick_async", SimpleRequest({}, session), response)
        assert response.done.done()
        assert json.loads(response.body) == {"ok": True}

    def test_close_shuts_down_owned_executor(self):
        api = Dispatcher(HANDLERS)
        executor = api.executor
        api.close()
        assert executor.pool._shutdown

    def test_close_leaves_injected_executor(self):
        executor = InlineExecutor()
        with Dispatcher(HANDLERS, executor=executor) as api:
            assert api.executor is executor
        assert executor.submitted == 0

    def test_injected_executor_survives_close(self, session):
        executor = InlineExecutor()
        api = Dispatcher(HANDLERS, executor=executor)
        api.set_access_level(session, 0)
        api.close()
        assert api.executor is executor

        response = BufferedResponse()
        api.dispatch("block", "quick_async", SimpleRequest({}, session), response)
        assert executor.submitted == 1
        assert json.loads(response.body) == {"ok": True}

    def test_owned_executor_replaced_after_close(self):
        api = Dispatcher(HANDLERS)
        first = api.executor
        api.close()
        second = api.executor
        assert second is not first
        api.close()
        assert second.pool._shutdown


class TestErrorHook:
    def test_custom_send_error(self, session):
        seen = []

        class Quiet(Dispatcher):
            error_status = 400

            def send_error(self, response, error):
                seen.append(type(error))
                super().send_error(response, error)

        api = Quiet(HANDLERS, name="tests.api")
        api.set_access_level(session, 0)
        for method_id in ("fail", "sub"):
            response = BufferedResponse()
            api.dispatch("calc", method_id, SimpleRequest({}, session), response)
            assert response.wait(1).status == 400
        assert seen[0] is InvocationError
        assert seen[1].__name__ == "MethodNotFoundError"

    def test_send_error_failure_is_contained(self, session):
        class Exploding(Dispatcher):
            def send_error(self, response, error):
                raise RuntimeError("cannot write")

        api = Exploding(HANDLERS, name="tests.api")
        response = BufferedResponse()
        api.dispatch("calc", "add", SimpleRequest({}, session), response)
        assert response.wait(1).status == 200
        assert response.body == b""

    def test_error_kinds_reach_hook(self, session):
        kinds = []

        class Recording(Dispatcher):
            def send_error(self, response, error):
                kinds.append(error)
                super().send_error(response, error)

        api = Recording(HANDLERS, name="tests.api")
        response = BufferedResponse()
        api.dispatch("spy", "secret", SimpleRequest({}, session), response)
        assert isinstance(kinds[0], AccessDeniedError)
        assert not isinstance(kinds[0], AsyncBusyError)

    def test_reject_closes_response(self, dispatcher):
        response = BufferedResponse()
        dispatcher.reject(response, ValueError("Malformed request."))
        assert response.done.done()
        assert response.status == 409

    def test_repr(self, dispatcher):
        assert "tests.api" in repr(dispatcher)

    def test_default_name(self):
        assert Dispatcher({}).name == "apigate.framework.dispatcher.Dispatcher"
