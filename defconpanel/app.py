"""Command-line entry point: console commands driving a DEFCON panel."""

from __future__ import annotations

import argparse
import json
import sys
from collections import deque
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Callable, TextIO

from .commands import CommandProcessor, CommSettings
from .defcon import DefconPanel, HeaderState
from .hardware import SystemClock
from .messages import deliver, response_message, telemetry_message
from .serial_input import SerialLineReader

QUEUE_LENGTH = 10

COMMAND_INTERVAL_MS = 100
TX_INTERVAL_MS = 100
TELEMETRY_INTERVAL_MS = 5000


@dataclass
class Task:
    """A callback run every `interval` milliseconds."""

    interval: int
    callback: Callable[[], Any]
    next_run: int = 0
    enabled: bool = True


class Scheduler:
    """Runs periodic tasks against a millisecond clock; a new task runs at once."""

    def __init__(self, clock: Any) -> None:
        self.clock = clock
        self.tasks: list[Task] = []

    def add(self, interval: int, callback: Callable[[], Any]) -> Task:
        if interval <= 0:
            raise ValueError("task interval must be positive")
        task = Task(interval, callback, next_run=self.clock.millis())
        self.tasks.append(task)
        return task

    def run_pending(self) -> int:
        """Run every enabled task that is due; return how many ran."""
        ran = 0
        for task in self.tasks:
            now = self.clock.millis()
            if task.enabled and now >= task.next_run:
                task.callback()
                task.next_run = now + task.interval
                ran += 1
        return ran


class _Restart(Exception):
    """Raised when a command asks the device to restart."""


def _load_settings(path: Path) -> CommSettings:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return CommSettings()
    if not isinstance(data, dict):
        return CommSettings()
    names = {f.name for f in fields(CommSettings)}
    return CommSettings(**{k: str(v) for k, v in data.items() if k in names})


class _Controller:
    def __init__(
        self,
        panel: DefconPanel,
        settings: CommSettings,
        stat_topic: str,
        tele_topic: str,
        settings_path: Path,
        out: TextIO,
    ) -> None:
        self.panel = panel
        self.stat_topic = stat_topic
        self.tele_topic = tele_topic
        self.settings_path = settings_path
        self.out = out
        self.restart_requested = False
        self.commands: deque[str] = deque()
        self.outgoing: deque[str] = deque()
        self.reader = SerialLineReader()
        panel.on_response = self.respond
        self.processor = CommandProcessor(panel, settings, self.save_settings, self.restart, self.log)

    @staticmethod
    def _push(queue: deque[str], message: str) -> None:
        if len(queue) < QUEUE_LENGTH:
            queue.append(message)

    def log(self, line: str) -> None:
        print(line, file=self.out)

    def publish(self, topic: str, payload: str) -> None:
        print(f"{topic} {payload}", file=self.out)

    def respond(self, command: str, payload: str) -> None:
        self._push(self.outgoing, response_message(self.stat_topic, command, payload))

    def feed_serial(self, data: str) -> None:
        for message in self.reader.feed(data):
            self.log(message)
            self._push(self.commands, message)

    def process_next_command(self) -> None:
        if self.commands:
            self.processor.handle(self.commands.popleft())

    def transmit_next(self) -> None:
        if self.outgoing:
            deliver(self.outgoing.popleft(), self.publish, self.log, self.panel.time_source)

    def queue_telemetry(self) -> None:
        self._push(self.outgoing, telemetry_message(self.tele_topic, self.panel.status_json(1)))

    def drain(self) -> None:
        while self.commands or self.outgoing:
            self.process_next_command()
            self.transmit_next()

    def save_settings(self, settings: CommSettings) -> bool:
        try:
            self.settings_path.write_text(json.dumps(asdict(settings)), encoding="utf-8")
        except OSError as exc:
            self.log(f"cannot write {self.settings_path}: {exc}")
            return False
        return True

    def restart(self) -> None:
        """Drop pending work and stop the run loop."""
        self.restart_requested = True
        self.commands.clear()
        self.outgoing.clear()
        raise _Restart("restart requested")


def _run(controller: _Controller, panel: DefconPanel, scheduler: Scheduler, lines: TextIO) -> None:
    for line in lines:
        controller.feed_serial(line.rstrip("\r\n") + "\r\n")
        scheduler.run_pending()
        panel.run_fast()
    controller.drain()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="defconpanel", description="Drive a DEFCON level panel.")
    parser.add_argument("input", nargs="?", default="-", help="file of commands, one per line (default: stdin)")
    parser.add_argument("--config", default="DefconCfg.json", help="project configuration file")
    parser.add_argument("--comms-config", default="DefconCom.json", help="communication settings file")
    parser.add_argument("--stat-topic", default="stat/DEFCON", help="topic for command responses")
    parser.add_argument("--tele-topic", default="tele/DEFCON", help="topic for telemetry")
    args = parser.parse_args(argv)

    out = sys.stdout
    clock = SystemClock()
    panel = DefconPanel(args.config, clock=clock)
    settings_path = Path(args.comms_config)
    controller = _Controller(
        panel, _load_settings(settings_path), args.stat_topic, args.tele_topic, settings_path, out
    )

    panel.load_config()
    panel.start()
    panel.set_header(HeaderState.AP_MODE)
    panel.run_fast()

    scheduler = Scheduler(clock)
    scheduler.add(COMMAND_INTERVAL_MS, controller.process_next_command)
    scheduler.add(TX_INTERVAL_MS, controller.transmit_next)
    scheduler.add(TELEMETRY_INTERVAL_MS, controller.queue_telemetry)

    try:
        if args.input == "-":
            _run(controller, panel, scheduler, sys.stdin)
        else:
            with open(args.input, encoding="utf-8") as lines:
                _run(controller, panel, scheduler, lines)
    except _Restart:
        controller.log("restarting")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())