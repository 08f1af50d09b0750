"""Blocking D-Bus signal source built on jeepney."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Final, Protocol

from jeepney import (
    DBusErrorResponse,
    HeaderFields,
    MatchRule,
    Message,
    MessageType,
    message_bus,
)
from jeepney.io.blocking import DBusConnection, open_dbus_connection
from jeepney.wrappers import unwrap_msg

from .config import BusType
from .errors import BusConnectionError, MatchRegistrationError
from .models import RawSignal
from .normalizer import MODEM_MANAGER_CALL_INTERFACE, OFONO_INTERFACE

logger = logging.getLogger(__name__)

MATCH_INTERFACES: Final[tuple[str, ...]] = (OFONO_INTERFACE, MODEM_MANAGER_CALL_INTERFACE)


class SignalSource(Protocol):
    """Protocol producing raw bus signals in delivery order."""

    def signals(self) -> Iterator[RawSignal]:  # pragma: no cover - protocol signature
        """Yield signals until the underlying connection closes."""
        ...

    def close(self) -> None:  # pragma: no cover - protocol signature
        """Release the underlying connection."""
        ...


def build_match_rules(interfaces: Sequence[str] = MATCH_INTERFACES) -> list[MatchRule]:
    """Return one signal match rule per interface in *interfaces*."""
    return [MatchRule(type="signal", interface=interface) for interface in interfaces]


def to_raw_signal(message: Message) -> RawSignal | None:
    """Convert a jeepney *message* into a :class:`RawSignal`; non-signals yield ``None``."""
    header = message.header
    if header.message_type is not MessageType.signal:
        return None
    fields = header.fields
    return RawSignal(
        interface=fields.get(HeaderFields.interface, ""),
        member=fields.get(HeaderFields.member, ""),
        signature=fields.get(HeaderFields.signature, ""),
        body=tuple(message.body),
        path=fields.get(HeaderFields.path),
        sender=fields.get(HeaderFields.sender),
    )


class DBusSignalSource(SignalSource):
    """Receive telephony signals from a blocking jeepney connection."""

    def __init__(self, connection: DBusConnection) -> None:
        """Wrap an already open *connection*."""
        self._connection = connection

    @classmethod
    def connect(
        cls, bus: BusType = "system", *, interfaces: Sequence[str] = MATCH_INTERFACES
    ) -> DBusSignalSource:
        """Open *bus* and subscribe to signals on *interfaces*."""
        try:
            connection = open_dbus_connection(bus=bus.upper())
        except (OSError, KeyError, ValueError) as exc:
            raise BusConnectionError(f"Unable to connect to the {bus} bus: {exc}") from exc
        logger.debug("Connected to the %s bus as %s", bus, connection.unique_name)
        source = cls(connection)
        try:
            source.add_matches(build_match_rules(interfaces))
        except MatchRegistrationError:
            source.close()
            raise
        return source

    def add_matches(self, rules: Sequence[MatchRule]) -> None:
        """Register *rules* with the message bus daemon."""
        for rule in rules:
            try:
                reply = self._connection.send_and_get_reply(message_bus.AddMatch(rule))
                unwrap_msg(reply)
            except (DBusErrorResponse, OSError) as exc:
                raise MatchRegistrationError(
                    f"Unable to add match {rule.serialise()}: {exc}"
                ) from exc
            logger.debug("Added match %s", rule.serialise())

    def signals(self) -> Iterator[RawSignal]:
        """Yield signals in arrival order, blocking without timeout between them."""
        while True:
            try:
                message = self._connection.receive()
            except (OSError, EOFError) as exc:
                logger.info("Bus connection closed: %s", exc)
                return
            signal = to_raw_signal(message)
            if signal is not None:
                yield signal

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()
