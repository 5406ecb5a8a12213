"""
Signaling envelope parsing and construction.

An envelope is a JSON object whose ``type`` field selects a MessageKind.
Every other field is opaque payload: candidate objects, bare candidate
strings and SDP blobs all pass through untouched.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Union

from ..infrastructure.exceptions import MalformedMessage, UnknownMessageKind
from .types import LIFECYCLE_KINDS, NEGOTIATION_KINDS, WS_FIELD_TYPE, MessageKind

Frame = Union[str, bytes]


@dataclass(frozen=True)
class SignalingMessage:
    """An immutable signaling envelope."""

    kind: MessageKind
    payload: Mapping[str, Any] = field(default_factory=dict)
    raw: str = ""

    @property
    def is_negotiation(self) -> bool:
        return self.kind in NEGOTIATION_KINDS

    @property
    def is_lifecycle(self) -> bool:
        return self.kind in LIFECYCLE_KINDS

    def to_wire(self) -> str:
        """Return the text sent to peers; the original frame when there is one."""
        if self.raw:
            return self.raw
        return json.dumps({WS_FIELD_TYPE: self.kind.value, **self.payload})


def create_message(kind: Union[MessageKind, str], **fields: Any) -> SignalingMessage:
    """
    Build an outbound envelope.

    Args:
        kind: Message kind or its wire ``type`` string
        **fields: Kind-specific fields (``sdp``, ``candidate``, ...)

    Returns:
        SignalingMessage whose ``raw`` text is the serialized envelope
    """
    kind = MessageKind(kind)
    payload = MappingProxyType(dict(fields))
    raw = json.dumps({WS_FIELD_TYPE: kind.value, **fields})
    return SignalingMessage(kind=kind, payload=payload, raw=raw)


def parse_message(frame: Frame) -> SignalingMessage:
    """
    Parse an inbound WebSocket frame into a SignalingMessage.

    Binary frames are decoded as UTF-8 before parsing.

    Raises:
        MalformedMessage: If the frame is not a JSON object with a string ``type``
        UnknownMessageKind: If ``type`` is not a routed kind
    """
    if isinstance(frame, (bytes, bytearray, memoryview)):
        try:
            text = bytes(frame).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"Binary frame is not UTF-8: {e}", frame) from e
    elif isinstance(frame, str):
        text = frame
    else:
        raise MalformedMessage(f"Unsupported frame type: {type(frame).__name__}", frame)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"Invalid JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise MalformedMessage("Envelope must be a JSON object", text)

    message_type = data.get(WS_FIELD_TYPE)
    if not isinstance(message_type, str):
        raise MalformedMessage("Envelope is missing a string 'type' field", text)

    try:
        kind = MessageKind(message_type)
    except ValueError:
        raise UnknownMessageKind(message_type) from None

    payload = {key: value for key, value in data.items() if key != WS_FIELD_TYPE}
    return SignalingMessage(kind=kind, payload=MappingProxyType(payload), raw=text)
