"""apigate framework — operation metadata, binding and dispatch.

    operations.py   @api_method, Param, describe_handler
    registry.py     Class identifier → handler descriptor
    converters.py   Request text → typed argument
    params.py       Operation signature → argument list
    access.py       Per-session access levels
    instances.py    Per-session handler instances
    context.py      Request/response contracts and in-memory versions
    dispatcher.py   The dispatch state machine
"""

from apigate.framework.access import AccessController
from apigate.framework.context import BufferedResponse, RequestContext, ResponseContext, SimpleRequest
from apigate.framework.converters import URI, URL, ValueConverter
from apigate.framework.dispatcher import Dispatcher
from apigate.framework.instances import SessionObjectStore
from apigate.framework.operations import (
    ExecutionMode,
    HandlerDescriptor,
    OperationDescriptor,
    Param,
    ParamKind,
    ParamSpec,
    api_method,
    describe_handler,
)
from apigate.framework.params import ParameterBinder
from apigate.framework.registry import OperationRegistry

__all__ = [
    "AccessController",
    "BufferedResponse",
    "Dispatcher",
    "ExecutionMode",
    "HandlerDescriptor",
    "OperationDescriptor",
    "OperationRegistry",
    "Param",
    "ParamKind",
    "ParamSpec",
    "ParameterBinder",
    "RequestContext",
    "ResponseContext",
    "SessionObjectStore",
    "SimpleRequest",
    "URI",
    "URL",
    "ValueConverter",
    "api_method",
    "describe_handler",
]
