"""Processing of received command documents."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable

from .defcon import DefconPanel


@dataclass
class CommSettings:
    """Wi-Fi and MQTT connection settings."""

    wifi_ssid: str = ""
    wifi_password: str = field(default_factory=str)
    mqtt_server: str = ""
    mqtt_user: str = "mosquitto"
    mqtt_password: str = field(default_factory=str)
    mqtt_topic: str = "DEFCON"


# Command names in the same order as the fields of CommSettings.
_SETTING_COMMAND_NAMES = (
    "WSsid",
    "WPasswd",
    "MQTTSrv",
    "MQTTUser",
    "MQTTPasswd",
    "MQTTTopic",
)

_SETTING_COMMANDS = dict(
    zip(_SETTING_COMMAND_NAMES, (f.name for f in fields(CommSettings)))
)

HELP_LINES = (
    "Communication settings commands:",
    "WSsid <SSID> - set the Wi-Fi SSID",
    "WPasswd <password> - set the Wi-Fi password",
    "MQTTSrv <IP|URL> - address of the MQTT broker",
    "MQTTUser <user> - user for the MQTT broker",
    "MQTTPasswd <password> - password for the MQTT broker user",
    "MQTTTopic <string> - root name of the MQTT topics",
    "SaveCom - save the communication settings",
)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _to_int(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


class CommandProcessor:
    """Carries out commands sent as {"COMANDO": ..., "PAYLOAD": ...} documents."""

    def __init__(
        self,
        panel: DefconPanel,
        settings: CommSettings,
        save_settings: Callable[[CommSettings], bool],
        restart: Callable[[], None],
        log: Callable[[str], Any],
    ) -> None:
        self.panel = panel
        self.settings = settings
        self.save_settings = save_settings
        self.restart = restart
        self.log = log

    def handle(self, message: str) -> bool:
        """Run one command; True if it was understood and carried out."""
        try:
            data = json.loads(message)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            self.log("received a command that cannot be deserialized")
            return False

        command = _text(data.get("COMANDO"))
        payload = _text(data.get("PAYLOAD"))

        if command in _SETTING_COMMANDS:
            setattr(self.settings, _SETTING_COMMANDS[command], payload)
            self.log(f"{command} OK: {payload}")
            return True
        if command == "SaveCom":
            if self.save_settings(self.settings):
                self.restart()
            return True
        if command == "Help":
            for line in HELP_LINES:
                self.log(line)
            return True
        if command == "DEFCONLEVEL":
            try:
                self.panel.set_level(_to_int(payload))
            except ValueError as exc:
                self.log(str(exc))
                return False
            return True
        if command == "PROBLEMAS":
            self.panel.problems(payload)
            return True
        if command == "SILENCIOCOM":
            self.panel.silence_comms_warning()
            return True
        if command == "AVISO":
            self.panel.alert(_to_int(payload))
            return True
        if command == "REBOOT":
            self.restart()
            return True
        if command == "HWTEST":
            self.panel.hardware_test(self.restart)
            return True

        self.log("received a command that is not understood")
        self.log(f"Command: {command}")
        self.log(f"Payload: {payload}")
        return False