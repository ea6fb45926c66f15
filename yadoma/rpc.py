"""Status codes and the error type raised by the agent's services."""

from __future__ import annotations

from enum import IntEnum


class StatusCode(IntEnum):
    """Canonical RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class RpcError(Exception):
    """An error carrying an RPC status code and a human-readable message."""

    def __init__(self, code, message):
        self.code = StatusCode(code)
        self.message = str(message)
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"RpcError({self.code.name}, {self.message!r})"