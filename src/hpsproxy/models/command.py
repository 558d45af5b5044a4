"""Decoded HTTP Control Point commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .enums import REQUEST_OPTIONS, ControlOption, HttpMethod, Scheme


class CommandKind(Enum):
    """What a control point write asks the proxy to do."""
    REQUEST = "request"
    CANCEL = "cancel"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class ControlCommand:
    """One control point write, decoded.

    Only REQUEST commands carry a method and scheme. ``raw`` keeps the first
    byte as written (None for an empty write) so rejections can be logged.
    """

    kind: CommandKind
    raw: int | None = None
    method: HttpMethod | None = None
    scheme: Scheme | None = None

    @classmethod
    def request(cls, raw: int, method: HttpMethod, scheme: Scheme) -> ControlCommand:
        return cls(CommandKind.REQUEST, raw, method, scheme)

    @classmethod
    def cancel(cls) -> ControlCommand:
        return cls(CommandKind.CANCEL, int(ControlOption.CANCEL))

    @classmethod
    def invalid(cls, raw: int | None) -> ControlCommand:
        return cls(CommandKind.INVALID, raw)

    @property
    def is_request(self) -> bool:
        return self.kind is CommandKind.REQUEST

    @property
    def is_cancel(self) -> bool:
        return self.kind is CommandKind.CANCEL

    @property
    def is_invalid(self) -> bool:
        return self.kind is CommandKind.INVALID


def decode_control_command(data: bytes) -> ControlCommand:
    """Decode a control point write.

    Only the first byte is significant; anything after it is ignored.

    Args:
        data: Raw value written to the HTTP Control Point characteristic

    Returns:
        ControlCommand; empty input and unknown opcodes decode as INVALID
    """
    if not data:
        return ControlCommand.invalid(None)

    raw = data[0]
    try:
        option = ControlOption(raw)
    except ValueError:
        return ControlCommand.invalid(raw)

    if option == ControlOption.CANCEL:
        return ControlCommand.cancel()
    if option not in REQUEST_OPTIONS:
        return ControlCommand.invalid(raw)

    method, scheme = REQUEST_OPTIONS[option]
    return ControlCommand.request(raw, method, scheme)
