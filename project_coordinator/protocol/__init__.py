"""JSON-RPC protocol engine, message model and tool catalog."""

from .engine import ProtocolEngine, ProtocolError
from .messages import JSONRPCRequest, encode_response, parse_request
from .tools import TOOL_CATALOG, ToolDispatcher, tool_catalog

__all__ = [
    "ProtocolEngine",
    "ProtocolError",
    "JSONRPCRequest",
    "encode_response",
    "parse_request",
    "TOOL_CATALOG",
    "ToolDispatcher",
    "tool_catalog",
]
