# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Size-bounded message envelope.

An ``Envelope`` holds the serialized bytes of one value together with the
transport class it is destined for.  The value is turned into bytes by a
``Codec`` — any object with ``serialize`` / ``deserialize`` — so the same
envelope carries CoT records or anything else.

Size limits per transport class:

    UDP   1400 bytes   (fits a single datagram under a typical MTU)
    TCP   64000 bytes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

from taktile.comms.cot import CotRecord
from taktile.comms.cot_xml import from_bytes, to_bytes
from taktile.comms.schemes import Scheme
from taktile.errors import InvalidArgument, PayloadTooLarge

T = TypeVar("T")

UDP_MAX_PAYLOAD = 1400
TCP_MAX_PAYLOAD = 64000


class Transport(Enum):
    UDP = "udp"
    TCP = "tcp"

    @property
    def max_payload(self) -> int:
        return UDP_MAX_PAYLOAD if self is Transport.UDP else TCP_MAX_PAYLOAD


def transport_for(scheme: Scheme) -> Transport:
    """Transport class of a scheme: datagram schemes are UDP, the rest TCP."""
    return Transport.UDP if scheme.is_udp else Transport.TCP


class Codec(Protocol[T]):
    def serialize(self, value: T) -> bytes: ...

    def deserialize(self, data: bytes) -> T: ...


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """Serialized payload bounded by its transport's size limit."""

    payload: bytes
    transport: Transport

    def __post_init__(self) -> None:
        if not isinstance(self.payload, (bytes, bytearray)):
            raise InvalidArgument("Envelope payload must be bytes")
        limit = self.transport.max_payload
        if len(self.payload) > limit:
            raise PayloadTooLarge(len(self.payload), limit)

    @classmethod
    def wrap(cls, value: T, codec: Codec[T], transport: Transport) -> Envelope[T]:
        """Serialize ``value`` and check it fits ``transport``.

        Raises:
            PayloadTooLarge: the serialized value exceeds the limit.
        """
        return cls(payload=bytes(codec.serialize(value)), transport=transport)

    @classmethod
    def from_bytes(cls, data: bytes, transport: Transport) -> Envelope[T]:
        """Wrap bytes received from ``transport``, applying the same bound."""
        return cls(payload=bytes(data), transport=transport)

    def open(self, codec: Codec[T]) -> T:
        """Deserialize the payload."""
        return codec.deserialize(self.payload)

    @property
    def size(self) -> int:
        return len(self.payload)


class CotSerializer:
    """Codec for CotRecord: UTF-8 CoT XML on the wire.

    Args:
        host_id: Producer identity written into the flow tag.
    """

    def __init__(self, host_id: str) -> None:
        self._host_id = host_id

    @property
    def host_id(self) -> str:
        return self._host_id

    def serialize(self, value: CotRecord) -> bytes:
        return to_bytes(value, self._host_id)

    def deserialize(self, data: bytes) -> CotRecord:
        return from_bytes(data)
