"""Outgoing message documents and their delivery to MQTT and the console."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable


class Delivery(Enum):
    """Where an outgoing message goes."""

    MQTT = "MQTT"
    SERIAL = "SERIE"
    BOTH = "BOTH"


def _message(delivery: Delivery, command: str, topic: str, response: str) -> str:
    return json.dumps(
        {"TIPO": delivery.value, "CMND": command, "MQTTT": topic, "RESP": response},
        separators=(",", ":"),
    )


def response_message(stat_topic: str, command: str, payload: str) -> str:
    """Build the document answering `command`, sent both to MQTT and the console."""
    return _message(Delivery.BOTH, command, f"{stat_topic}/{command}", payload)


def telemetry_message(tele_topic: str, status: str) -> str:
    """Build the periodic telemetry document, sent to MQTT only."""
    return _message(Delivery.MQTT, "TELE", f"{tele_topic}/INFO1", status)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def deliver(
    message: str,
    publish: Callable[[str, str], Any],
    log: Callable[[str], Any],
    timestamp: Callable[[], str],
) -> Delivery | None:
    """Send a queued message where its TIPO says; None if it cannot be understood."""
    try:
        data = json.loads(message)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        delivery = Delivery(data.get("TIPO"))
    except (ValueError, TypeError):
        return None

    command = _text(data.get("CMND"))
    topic = _text(data.get("MQTTT"))
    response = _text(data.get("RESP"))

    if delivery in (Delivery.MQTT, Delivery.BOTH):
        publish(topic, response)
    if delivery in (Delivery.SERIAL, Delivery.BOTH):
        log(f"{timestamp()} {command} {response}")
    return delivery