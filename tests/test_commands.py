import json

import pytest

from defconpanel.commands import HELP_LINES, CommandProcessor, CommSettings
from defconpanel.defcon import DefconPanel
from defconpanel.hardware import Buzzer, LedStrip, ManualClock
from defconpanel.serial_input import command_message


class Harness:
    def __init__(self, tmp_path, save_result=True, settings=None):
        self.clock = ManualClock()
        self.buzzer = Buzzer(sleep=lambda ms: None)
        self.panel = DefconPanel(
            tmp_path / "cfg.json",
            clock=self.clock,
            strip=LedStrip(50),
            buzzer=self.buzzer,
            time_source=lambda: "00:00:00",
        )
        self.panel.start()
        self.settings = settings if settings is not None else CommSettings()
        self.saved = []
        self.restarts = 0
        self.logged = []
        self.save_result = save_result
        self.processor = CommandProcessor(
            self.panel, self.settings, self._save, self._restart, self.logged.append
        )

    def _save(self, settings):
        self.saved.append(settings)
        return self.save_result

    def _restart(self):
        self.restarts += 1


@pytest.mark.parametrize(
    "command, field",
    [
        ("WSsid", "wifi_ssid"),
        ("WPasswd", "wifi_password"),
        ("MQTTSrv", "mqtt_server"),
        ("MQTTUser", "mqtt_user"),
        ("MQTTPasswd", "mqtt_password"),
        ("MQTTTopic", "mqtt_topic"),
    ],
)
def test_setting_commands(tmp_path, command, field):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message(command, "value")) is True
    assert getattr(h.settings, field) == "value"
    assert h.logged == [f"{command} OK: value"]


def test_save_then_restart(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("SaveCom", None)) is True
    assert h.saved == [h.settings]
    assert h.restarts == 1


def test_failed_save_does_not_restart(tmp_path):
    h = Harness(tmp_path, save_result=False)
    h.processor.handle(command_message("SaveCom", None))
    assert len(h.saved) == 1
    assert h.restarts == 0


def test_help_lists_commands(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("Help", None)) is True
    assert h.logged == list(HELP_LINES)


def test_defcon_level(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("DEFCONLEVEL", "3")) is True
    assert h.panel.target_level == 3


def test_defcon_level_numeric_payload(tmp_path):
    h = Harness(tmp_path, settings=CommSettings())
    message = json.dumps({"COMANDO": "DEFCONLEVEL", "PAYLOAD": 2})
    assert h.processor.handle(message) is True
    assert h.panel.target_level == 2


def test_defcon_level_out_of_range(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("DEFCONLEVEL", "9")) is False
    assert h.panel.target_level == 5
    assert len(h.logged) == 1


def test_problems(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("PROBLEMAS", '{"DISASTER":1}')) is True
    assert h.panel.target_level == 2


def test_silence(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("SILENCIOCOM", None)) is True
    assert h.panel.silenced is True


def test_alert_one(tmp_path):
    h = Harness(tmp_path)
    h.processor.handle(command_message("AVISO", "1"))
    assert h.buzzer.tones == [(1200, 300)] * 3


def test_reboot(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("REBOOT", None)) is True
    assert h.restarts == 1


def test_hardware_test_restarts(tmp_path):
    h = Harness(tmp_path)
    h.processor.handle(command_message("HWTEST", None))
    assert h.restarts == 1
    assert h.buzzer.tones[-1] == (1400, 500)


def test_unknown_command(tmp_path):
    h = Harness(tmp_path)
    assert h.processor.handle(command_message("FOO", "bar")) is False
    assert "Command: FOO" in h.logged
    assert "Payload: bar" in h.logged


def test_undecodable_message(tmp_path):
    h = Harness(tmp_path, settings=CommSettings())
    assert h.processor.handle("not json") is False
    assert h.restarts == 0
    assert len(h.logged) == 1