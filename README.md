# defconpanel

A controller for an office "DEFCON" light panel. It takes counts of open
monitoring problems (disaster, high, average, warning), works out a DEFCON
level from 5 (all quiet) down to 1, and steps an LED strip and a buzzer
through the change: a 400 Hz warning tone, a pause, a fade out of the old
level's block, a pause, and a fade in of the new one. When the change is
done the new level is reported as a `DEFCONLEVEL` response.

A header block of LEDs shows the state of the connection
(`defconpanel.defcon.HeaderState`):

| State        | Header colour | Meaning                                       |
|--------------|---------------|-----------------------------------------------|
| `NO_NETWORK` | red           | no network                                    |
| `AP_MODE`    | blue          | configuration mode                            |
| `NO_MQTT`    | orange        | network up, message broker unreachable        |
| `NO_DATA`    | magenta       | connected, but no problem data for 100 s      |
| `OK`         | white         | everything fine                               |

While the header is not `OK`, the panel beeps a reminder every two minutes
until the warning is silenced with `SILENCIOCOM`; going back to `OK` clears
the silence.

The level rule (`level_from_problems`): no problems gives 5; any average or
warning gives 4; any high, more than 3 average or more than 8 warning gives
3; any disaster, more than 3 high, more than 6 average or more than 15
warning gives 2; more than 3 disaster, more than 6 high, more than 15
average or more than 25 warning gives 1.

## Installing

```
pip install .
```

## Running

```
defconpanel [INPUT] [--config PATH] [--comms-config PATH]
            [--stat-topic TOPIC] [--tele-topic TOPIC]
```

Commands are read one per line from `INPUT`, or from standard input when it
is left out or is `-`. A line is split on spaces into a command and a
payload (the first word after the command), so a payload must not contain
spaces. Lines longer than 119 characters are dropped. For example:

```
DEFCONLEVEL 3
PROBLEMAS {"DISASTER":0,"HIGH":1,"AVERAGE":0,"WARNING":2}
SILENCIOCOM
AVISO 2
Help
```

| Command       | Effect                                                        |
|---------------|---------------------------------------------------------------|
| `DEFCONLEVEL` | start a change to the given level (1..5)                      |
| `PROBLEMAS`   | take a JSON object of problem counts and pick the level       |
| `SILENCIOCOM` | silence the connection-down reminder                          |
| `AVISO`       | alert 1 (three long beeps) or 2 (eight beeps, flashing header)|
| `WSsid`, `WPasswd`, `MQTTSrv`, `MQTTUser`, `MQTTPasswd`, `MQTTTopic` | set a communication setting |
| `SaveCom`     | write the settings to `--comms-config` as JSON, then restart  |
| `Help`        | list the communication settings commands                      |
| `REBOOT`      | restart                                                       |
| `HWTEST`      | light each LED in turn, play three tones, then restart        |

"Restart" stops reading input and prints `restarting`.

Each command line is echoed as the JSON document it becomes. Responses and
telemetry are printed: messages for the broker as `TOPIC PAYLOAD`
(responses under `--stat-topic`/`COMMAND`, telemetry every 5 seconds under
`--tele-topic`/`INFO1`), and console messages as `HH:MM:SS COMMAND
RESPONSE`, with the time taken as UTC plus two hours. The panel's state
machines advance once per input line, so a level change completes only if
enough lines arrive over enough time.

The settings file given by `--comms-config` is read at start-up, if it
holds a JSON object with the settings' field names; `--config` is read as
the project configuration file if present.

## What it does not do

- It drives no physical hardware: `LedStrip` keeps its pixels in memory and
  `Buzzer` records the tones it is asked to play.
- It makes no network connection: there is no MQTT client, Wi-Fi setup
  portal or network time; messages for the broker are printed instead.

## Using it as a library

- `defconpanel.config` holds the timings and the layout and colours of each
  LED block; `block(level)` returns a `Block` (level 0 is the header).
- `defconpanel.hardware` provides `LedStrip`, `Buzzer`, `ManualClock`,
  `SystemClock`, and the `color` / `color_hsv` helpers.
- `defconpanel.defcon` holds `DefconPanel`, `HeaderState`, `ChangeState`
  and `level_from_problems`.
- `defconpanel.serial_input.SerialLineReader` turns CRLF-terminated input
  into command documents; `command_message` builds one directly.
- `defconpanel.commands.CommandProcessor` carries out command documents
  against a panel and a `CommSettings`.
- `defconpanel.messages` builds response and telemetry documents
  (`response_message`, `telemetry_message`) and sends them with `deliver`.
- `defconpanel.app.Scheduler` runs periodic `Task`s against a clock.

`ManualClock` lets you step the panel through time:

```python
from defconpanel.defcon import DefconPanel, level_from_problems
from defconpanel.hardware import Buzzer, LedStrip, ManualClock

print(level_from_problems(0, 1, 0, 0, 5))  # 3

clock = ManualClock()
responses = []
panel = DefconPanel(
    "DefconCfg.json",
    clock=clock,
    strip=LedStrip(50),
    buzzer=Buzzer(sleep=lambda ms: None),
    on_response=lambda command, value: responses.append((command, value)),
)
panel.start()
panel.set_level(3)
for _ in range(5000):
    clock.advance(1)
    panel.run_fast()
print(panel.level)       # 3
print(responses[-1])     # ('DEFCONLEVEL', '3')
```

## Tests

```
pip install .[test]
pytest
```