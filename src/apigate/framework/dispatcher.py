"""Dispatcher — the single entry point from a transport to handler code.

WHY
───
A transport knows a class identifier, a method identifier and a bag of
request values.  The dispatcher turns that into one invocation of a
handler operation, or into one error response, and never lets an
exception escape to the transport.

ARCHITECTURE
────────────
::

    dispatch(class_id, method_id, request, response)
      │
      ├── 1. resolve      OperationRegistry     → ClassNotFoundError
      ├── 2. level        AccessController
      ├── 3. locate       HandlerDescriptor     → MethodNotFoundError
      ├── 4. authorize    metadata / level      → AccessDeniedError
      ├── 5. bind         ParameterBinder       → BindingError
      ├── 6. instance     SessionObjectStore    → InstantiationError
      │        (any failure in 1-6 → send_error + close)
      │
      └── 7. unit of work  (inline, or on the executor when async)
               ├── LockManager.try_acquire   → AsyncBusyError
               ├── invoke                    → InvocationError
               ├── release lock
               ├── encode result → response.write
               └── any failure → send_error;  always → response.close

Every error response goes through ``send_error``; subclasses override
it to change how failures are presented.  The default answers 409 for
all of them, so callers cannot tell error kinds apart.

Example::

    api = Dispatcher({"calc": Calculator}, name="calc.api")
    session = SessionState("s1")
    api.set_access_level(session, 0)

    response = BufferedResponse()
    api.dispatch("calc", "add", SimpleRequest({"a": "2", "b": "3"}, session), response)
    response.body                                  # b"5"
"""

import threading
from collections.abc import Callable, Mapping
from typing import Any

from apigate.core.codec import JsonCodec, get_default_codec
from apigate.core.errors import (
    AccessDeniedError,
    ApigateError,
    AsyncBusyError,
    ClassNotFoundError,
    InvocationError,
    MethodNotFoundError,
)
from apigate.core.logging import bind_context, get_logger, log_step, push_context
from apigate.execution.concurrency import LockManager
from apigate.execution.executors.local import LocalExecutor
from apigate.execution.executors.protocol import Executor
from apigate.execution.session import SessionState
from apigate.framework.access import AccessController
from apigate.framework.context import RequestContext, ResponseContext
from apigate.framework.converters import ValueConverter
from apigate.framework.instances import SessionObjectStore
from apigate.framework.operations import HandlerDescriptor, OperationDescriptor
from apigate.framework.params import ParameterBinder
from apigate.framework.registry import OperationRegistry

logger = get_logger(__name__)

DEFAULT_ERROR_STATUS = 409


class Dispatcher:
    """Routes requests to handler operations.

    Args:
        handlers: Class identifier → handler class or ``HandlerDescriptor``
        name: Identity scoping this dispatcher's session state
            (default: ``module.QualifiedName`` of the dispatcher class)
        executor: Runs asynchronous operations (default: a lazily
            created ``LocalExecutor``, shut down by ``close()``)
        converter: Value converter for request-bound parameters
        codec: Serializer for results
    """

    error_status: int = DEFAULT_ERROR_STATUS

    def __init__(
        self,
        handlers: Mapping[str, type | HandlerDescriptor],
        *,
        name: str | None = None,
        executor: Executor | None = None,
        converter: ValueConverter | None = None,
        codec: JsonCodec | None = None,
    ):
        cls = type(self)
        self.name = name or f"{cls.__module__}.{cls.__qualname__}"
        self.codec = codec or get_default_codec()
        self.registry = OperationRegistry(handlers)
        self.converter = converter or ValueConverter(self.codec)
        self.access = AccessController(self.name)
        self.instances = SessionObjectStore(self.name, self.registry)
        self.locks = LockManager(self.name)
        self.binder = ParameterBinder(self, self.instances, self.converter)

        self._executor = executor
        self._owns_executor = executor is None
        self._executor_lock = threading.Lock()

    # ── Access level ─────────────────────────────────────────────

    def get_access_level(self, session: SessionState) -> int:
        return self.access.get_access_level(session)

    def set_access_level(self, session: SessionState, level: int) -> None:
        self.access.set_access_level(session, level)

    # ── Error hook ───────────────────────────────────────────────

    def send_error(self, response: ResponseContext, error: BaseException) -> None:
        """Write the error response for ``error``.

        Override to change how failures are presented.  The default
        signals ``error_status`` regardless of the kind of failure.
        """
        response.send_error(self.error_status, str(error) or type(error).__name__)

    def reject(self, response: ResponseContext, error: BaseException) -> None:
        """Answer ``response`` with an error and complete it.

        Used by transports for failures found before dispatch (such as a
        malformed path) so they render exactly like dispatch failures.
        """
        try:
            self._send_error_safely(response, error)
        finally:
            response.close()

    # ── Dispatch ─────────────────────────────────────────────────

    def dispatch(
        self,
        class_id: str,
        method_id: str,
        request: RequestContext,
        response: ResponseContext,
    ) -> None:
        """Run one request to completion (or, if async, to submission).

        Never raises: every failure becomes an error response.
        """
        token = push_context(handler=class_id, operation=method_id, request_id=request.request_id)
        try:
            logger.debug("dispatch.start", method=request.method)
            try:
                task, operation = self._prepare(class_id, method_id, request, response)
            except Exception as e:
                self._log_failure("dispatch.rejected", e)
                self.reject(response, e)
                return

            if not operation.is_async:
                task()
                return

            try:
                self.executor.submit(task)
            except Exception as e:
                self._log_failure("dispatch.rejected", e)
                self.reject(response, e)
                return
            logger.debug("dispatch.submitted")
        finally:
            token.restore()

    def _prepare(
        self,
        class_id: str,
        method_id: str,
        request: RequestContext,
        response: ResponseContext,
    ) -> tuple[Callable[[], None], OperationDescriptor]:
        """Steps 1-6: everything that happens before handler code runs."""
        descriptor = self.registry.resolve(class_id)
        if descriptor is None:
            raise ClassNotFoundError(class_id)

        session = request.get_session()
        session.touch()
        bind_context(session_id=session.session_id)
        level = self.access.get_access_level(session)

        if not descriptor.has_method(method_id):
            raise MethodNotFoundError(class_id, method_id)
        operation = descriptor.operations[method_id]

        if operation is None or operation.http_method != request.method.upper():
            raise AccessDeniedError("Api method not available.").with_context(
                class_id=class_id, method_id=method_id
            )
        if operation.access_level > level:
            raise AccessDeniedError("Access denied.").with_context(
                class_id=class_id,
                method_id=method_id,
                session_id=session.session_id,
                required=operation.access_level,
                granted=level,
            )
        bind_context(mode=operation.mode.value)

        args = self.binder.bind(operation, session, request, response)
        if operation.is_static:
            target: Any = descriptor.handler
        else:
            target = self.instances.get_instance(descriptor.handler, session, create_if_missing=True)

        def task() -> None:
            self._execute(target, operation, args, session, response)

        return task, operation

    def _execute(
        self,
        target: Any,
        operation: OperationDescriptor,
        args: list[Any],
        session: SessionState,
        response: ResponseContext,
    ) -> None:
        """Step 7: the unit of work, run inline or on the executor."""
        try:
            lock = self.locks.try_acquire(session, operation.locking_group)
            try:
                with log_step("operation.invoke", locking_group=operation.locking_group or None):
                    try:
                        result = getattr(target, operation.name)(*args)
                    except Exception as e:
                        raise InvocationError(
                            f"{operation.name} failed: {e}", cause=e
                        ).with_context(method_id=operation.name, session_id=session.session_id) from e
            finally:
                if lock is not None:
                    lock.release()
            response.write(self.codec.encode(result), self.codec.media_type)
        except AsyncBusyError as e:
            logger.warning("operation.busy", **e.to_dict())
            self._send_error_safely(response, e)
        except Exception as e:
            self._log_failure("operation.failed", e)
            self._send_error_safely(response, e)
        finally:
            response.close()

    def _send_error_safely(self, response: ResponseContext, error: BaseException) -> None:
        try:
            self.send_error(response, error)
        except Exception as e:
            logger.error(
                "dispatch.send_error_failed",
                error=str(error),
                send_error=f"{type(e).__name__}: {e}",
            )

    @staticmethod
    def _log_failure(event: str, error: BaseException) -> None:
        if isinstance(error, ApigateError):
            logger.info(event, **error.to_dict())
        else:
            logger.error(event, error_type=type(error).__name__, message=str(error), exc_info=error)

    # ── Lifecycle ────────────────────────────────────────────────

    @property
    def executor(self) -> Executor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = LocalExecutor()
            return self._executor

    def close(self, wait: bool = True) -> None:
        """Shut down the executor if this dispatcher created it.

        An injected executor is left running and stays in use; an owned
        one is replaced by a fresh pool on the next asynchronous dispatch.
        """
        if not self._owns_executor:
            return
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"Dispatcher(name={self.name!r}, handlers={self.registry.class_ids()!r})"
