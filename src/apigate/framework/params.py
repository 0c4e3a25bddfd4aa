"""Parameter binder — operation signature → positional argument list.

Each parameter is bound in declaration order:

* Request-bound (``Annotated[T, Param("name")]``): the named request
  value converted to ``T``.  Absent and optional binds the parameter's
  default (``None`` unless one is declared); absent and required fails.
* Contextual (annotation only), first match wins:

    1. the live response, if it is an instance of the type
    2. the live request
    3. the session
    4. the dispatcher itself
    5. the session's existing instance of that handler type, or ``None``
"""

from typing import Any

from apigate.core.errors import BindingError, ConversionError
from apigate.execution.session import SessionState
from apigate.framework.context import RequestContext, ResponseContext
from apigate.framework.converters import ValueConverter
from apigate.framework.instances import SessionObjectStore
from apigate.framework.operations import OperationDescriptor, ParamKind, ParamSpec


class ParameterBinder:
    """Produces the arguments of one invocation."""

    def __init__(self, dispatcher: Any, instances: SessionObjectStore, converter: ValueConverter):
        self._dispatcher = dispatcher
        self._instances = instances
        self._converter = converter

    def bind(
        self,
        operation: OperationDescriptor,
        session: SessionState,
        request: RequestContext,
        response: ResponseContext,
    ) -> list[Any]:
        """Bind every parameter of ``operation``.

        Raises:
            BindingError: A required request value is missing, or a
                contextual type cannot be supplied
            ConversionError: A request value cannot be converted
        """
        return [
            self._bind_request(spec, request)
            if spec.kind is ParamKind.REQUEST
            else self._bind_contextual(spec, session, request, response)
            for spec in operation.params
        ]

    def _bind_request(self, spec: ParamSpec, request: RequestContext) -> Any:
        text = request.get_parameter(spec.request_name)
        if text is None:
            if spec.optional:
                return spec.default
            raise BindingError(f"Missing parameter: {spec.request_name}", parameter=spec.request_name)
        try:
            return self._converter.convert(text, spec.annotation)
        except ConversionError as e:
            e.parameter = spec.request_name
            raise

    def _bind_contextual(
        self,
        spec: ParamSpec,
        session: SessionState,
        request: RequestContext,
        response: ResponseContext,
    ) -> Any:
        target = spec.annotation
        if not isinstance(target, type):
            raise BindingError(f"Cannot bind contextual parameter {spec.name!r} of type {target!r}", parameter=spec.name)

        for candidate in (response, request, session, self._dispatcher):
            if isinstance(candidate, target):
                return candidate
        return self._instances.get_instance(target, session, create_if_missing=False)
