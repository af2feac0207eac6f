"""
Protocol engine

Reads newline-delimited JSON-RPC frames, tells calls from notifications,
routes calls by method, and writes exactly one response line per call.
Each input line is handled in its own task so a slow tool call does not
hold up the reader; the project store serializes the actual work.
"""

import asyncio
import logging
import sys
from typing import Any, Optional, TextIO

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, PARSE_ERROR

from ..config import CoordinatorConfig
from ..errors import CoordinatorError
from .messages import (
    JSONRPCRequest,
    MessageDecodeError,
    as_object,
    as_string,
    encode_response,
    error_response,
    parse_request,
    success_response,
)
from .tools import ToolDispatcher, tool_catalog

logger = logging.getLogger(__name__)

INITIALIZED_NOTIFICATIONS = {"initialized", "notifications/initialized"}
CANCELLED_NOTIFICATION = "notifications/cancelled"


class ProtocolError(Exception):
    """A request-level failure answered with its own JSON-RPC code."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ProtocolEngine:
    """JSON-RPC front end for the tool dispatcher."""

    def __init__(self, dispatcher: ToolDispatcher, config: CoordinatorConfig, output: Optional[TextIO] = None):
        self.dispatcher = dispatcher
        self.config = config
        self.output = output if output is not None else sys.stdout
        self._write_lock = asyncio.Lock()

    async def serve(self, input_stream: Optional[TextIO] = None) -> None:
        """
        Run until the input stream is exhausted

        Only an exception raised while reading the input propagates; all
        per-line failures are answered or logged.
        """
        input_stream = input_stream if input_stream is not None else sys.stdin
        pending: set[asyncio.Task] = set()

        logger.info("Protocol loop started")
        while True:
            line = await asyncio.to_thread(input_stream.readline)
            if not line:
                break
            task = asyncio.create_task(self._process(line))
            pending.add(task)
            task.add_done_callback(pending.discard)

        if pending:
            await asyncio.gather(*pending)
        logger.info("Input closed, protocol loop finished")

    async def handle_line(self, line: str) -> Optional[dict[str, Any]]:
        """Response for one input line, or None when nothing must be written."""
        line = line.strip()
        if not line:
            return None

        try:
            request = parse_request(line)
        except MessageDecodeError as e:
            if e.request_id is None:
                logger.warning(f"Dropping undecodable line: {e}")
                return None
            logger.warning(f"Undecodable request {e.request_id!r}: {e}")
            return error_response(e.request_id, PARSE_ERROR, str(e))

        if request.is_notification:
            self._handle_notification(request)
            return None

        try:
            result = await self._dispatch(request)
        except ProtocolError as e:
            logger.warning(f"{request.method} ({request.id!r}) rejected: {e.message}")
            return error_response(request.id, e.code, e.message)
        except CoordinatorError as e:
            logger.warning(f"{request.method} ({request.id!r}) failed: {e}")
            return error_response(request.id, INTERNAL_ERROR, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method} ({request.id!r})")
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {e}")

        return success_response(request.id, result)

    async def _dispatch(self, request: JSONRPCRequest) -> dict[str, Any]:
        if request.method == "initialize":
            return self._initialize_result()
        if request.method == "tools/list":
            return {"tools": tool_catalog()}
        if request.method == "tools/call":
            return await self._call_tool(request)
        raise ProtocolError(METHOD_NOT_FOUND, f"Method not found: {request.method}")

    def _initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.config.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {
                "name": self.config.server_name,
                "version": self.config.server_version,
            },
        }

    async def _call_tool(self, request: JSONRPCRequest) -> dict[str, Any]:
        params = request.params or {}
        name = as_string(params.get("name"))
        arguments = as_object(params.get("arguments"))
        if name is None or arguments is None:
            raise ProtocolError(INVALID_PARAMS, "Invalid params")

        content = await self.dispatcher.call(name, arguments)
        return {"content": [block.model_dump(by_alias=True, exclude_none=True) for block in content]}

    def _handle_notification(self, request: JSONRPCRequest) -> None:
        if request.method in INITIALIZED_NOTIFICATIONS:
            logger.info("Client initialized")
        elif request.method == CANCELLED_NOTIFICATION:
            params = request.params or {}
            logger.info(f"Client cancelled request {params.get('requestId')!r}")
        else:
            logger.debug(f"Ignoring notification {request.method}")

    async def _process(self, line: str) -> None:
        response = await self.handle_line(line)
        if response is not None:
            await self._write(response)

    async def _write(self, response: dict[str, Any]) -> None:
        frame = encode_response(response) + "\n"
        async with self._write_lock:
            try:
                self.output.write(frame)
                self.output.flush()
            except (OSError, ValueError) as e:
                logger.error(f"Could not write response {response.get('id')!r}: {e}")
