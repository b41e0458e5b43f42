"""Spoken command mappings."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class Command(str, Enum):
    DESCRIBE = "describe"
    STOP_SPEAKING = "stop_speaking"
    START_CAMERA = "start_camera"
    UNKNOWN = "unknown"


# Checked in order; the first phrase contained in the utterance wins.
COMMANDS: Tuple[Tuple[str, Command], ...] = (
    ("what do you see", Command.DESCRIBE),
    ("surroundings", Command.DESCRIBE),
    ("stop speaking", Command.STOP_SPEAKING),
    ("start camera", Command.START_CAMERA),
)

KEY_COMMANDS: Dict[str, Command] = {
    "d": Command.DESCRIBE,
    "s": Command.STOP_SPEAKING,
}


def normalize(text: str) -> str:
    return " ".join((text or "").lower().strip().rstrip("?.!").split())


def parse_command(text: str) -> Command:
    cleaned = normalize(text)
    if not cleaned:
        return Command.UNKNOWN
    for phrase, command in COMMANDS:
        if phrase in cleaned:
            return command
    return Command.UNKNOWN


def key_to_command(key: int) -> Command:
    if key == -1 or key == 255:
        return Command.UNKNOWN
    return KEY_COMMANDS.get(chr(key).lower(), Command.UNKNOWN)
