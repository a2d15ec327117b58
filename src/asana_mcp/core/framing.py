# ============================================================================
# ASANA MCP - STREAM FRAMING
# ============================================================================
# Copyright 2026 Asana MCP Contributors. All Rights Reserved.
#
# Server-sent-event framing for the HTTP streaming routes.
#
# FRAME:  data: {"id": ..., "type": "data" | "error" | "complete", ...}\n\n
#
# ORDER per request:
#   data (announcement) → data (result) → complete
#   data (announcement) → error            on any failure
#
# Exactly one terminal frame (complete or error) per request id; nothing is
# emitted after it.
# ============================================================================

import itertools
import json
import logging
import time
from collections.abc import AsyncIterator
from typing import Any, Awaitable, Callable

from .errors import GatewayError

logger = logging.getLogger(__name__)

__all__ = [
    "FRAME_DATA",
    "FRAME_ERROR",
    "FRAME_COMPLETE",
    "FrameSequenceError",
    "StreamFramer",
    "next_request_id",
    "error_message",
    "stream_operation",
]

FRAME_DATA = "data"
FRAME_ERROR = "error"
FRAME_COMPLETE = "complete"

_sequence = itertools.count(1)


def next_request_id() -> str:
    return f"req_{int(time.time() * 1000)}_{next(_sequence)}"


class FrameSequenceError(RuntimeError):
    """A frame was requested after the stream's terminal frame."""


class StreamFramer:
    """Builds the frames of one streamed response."""

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id or next_request_id()
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    def data(self, payload: Any) -> bytes:
        return self._frame(FRAME_DATA, data=payload)

    def complete(self, payload: Any = None) -> bytes:
        frame = self._frame(FRAME_COMPLETE, data=payload)
        self._terminated = True
        return frame

    def error(self, message: str) -> bytes:
        frame = self._frame(FRAME_ERROR, error=message)
        self._terminated = True
        return frame

    def _frame(self, frame_type: str, data: Any = None, error: str | None = None) -> bytes:
        if self._terminated:
            raise FrameSequenceError(
                f"Stream {self.request_id} already terminated; refusing '{frame_type}' frame"
            )
        response: dict[str, Any] = {"id": self.request_id, "type": frame_type}
        if data is not None:
            response["data"] = data
        if error is not None:
            response["error"] = error
        return f"data: {json.dumps(response, default=str)}\n\n".encode("utf-8")


def error_message(exc: BaseException) -> str:
    """Human-readable message for a failure. Never a traceback."""
    if isinstance(exc, GatewayError):
        return exc.message
    return str(exc) or "Unknown error"


async def stream_operation(
    framer: StreamFramer,
    announcement: dict[str, Any],
    operation: Callable[[], Awaitable[Any]],
    completion: dict[str, Any] | None = None,
) -> AsyncIterator[bytes]:
    """Yield the frames for one operation, always ending in a terminal frame."""
    yield framer.data(announcement)

    try:
        result = await operation()
        frame = framer.data(result)
    except GatewayError as e:
        logger.warning(f"[{framer.request_id}] {type(e).__name__}: {e.message}")
        yield framer.error(e.message)
        return
    except Exception as e:
        logger.exception(f"[{framer.request_id}] Error executing MCP operation")
        yield framer.error(error_message(e))
        return

    yield frame
    yield framer.complete(completion)
