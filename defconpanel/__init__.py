"""Controller for a DEFCON-style status light panel: level rules, LED and buzzer state machines, and a command console."""

__version__ = "1.0.0"
__all__ = ["app", "commands", "config", "defcon", "hardware", "messages", "serial_input"]