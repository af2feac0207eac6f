"""
JSON-RPC message model

Inbound frames are decoded into a pydantic JSONRPCRequest; generic payloads
are pydantic ``JsonValue`` trees (str | int | float | bool | None | list |
dict) and are narrowed with the ``as_*`` helpers instead of being passed
around untyped. Outbound frames are plain dicts encoded on a single line.
"""

import json
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, JsonValue, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

JSONRPC_VERSION = "2.0"

RequestId = Union[StrictInt, StrictStr]


class JSONRPCRequest(BaseModel):
    """A call (with id) or a notification (without one)"""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"]
    method: StrictStr
    params: Optional[dict[str, JsonValue]] = None
    id: Optional[RequestId] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class MessageDecodeError(Exception):
    """Raised when a line is not a structurally valid request."""

    def __init__(self, message: str, request_id: Optional[Union[int, str]] = None):
        super().__init__(message)
        self.request_id = request_id


def parse_request(line: str) -> JSONRPCRequest:
    """
    Decode one input line

    Raises:
        MessageDecodeError: with the salvaged id (if any) when the line is
            not JSON or does not have the request shape
    """
    try:
        return JSONRPCRequest.model_validate_json(line)
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        detail = first.get("msg", "invalid request")
        location = ".".join(str(part) for part in first.get("loc", ()))
        if location:
            detail = f"{location}: {detail}"
        raise MessageDecodeError(f"Parse error: {detail}", salvage_request_id(line)) from e


def salvage_request_id(line: str) -> Optional[Union[int, str]]:
    """Best-effort id recovery from a line that failed to decode as a request"""
    try:
        raw = json.loads(line)
    except (ValueError, RecursionError):
        return None
    if not isinstance(raw, dict):
        return None
    request_id = raw.get("id")
    # bool is an int subclass but never a valid id
    if isinstance(request_id, bool):
        return None
    if isinstance(request_id, (int, str)):
        return request_id
    return None


def success_response(request_id: Union[int, str], result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: Union[int, str], code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def encode_response(response: dict[str, Any]) -> str:
    """Single-line UTF-8 JSON with sorted keys; json.dumps escapes embedded newlines"""
    return json.dumps(response, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def as_object(value: JsonValue) -> Optional[dict[str, JsonValue]]:
    return value if isinstance(value, dict) else None


def as_string(value: JsonValue) -> Optional[str]:
    return value if isinstance(value, str) else None
