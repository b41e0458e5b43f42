# speech_formatter.py
from __future__ import annotations

from walkassist.config import NOTHING_LABEL
from walkassist.logic.spatial import round_distance
from walkassist.logic.state import PerceptionSnapshot, Surroundings


class SpeechFormatter:
    """
    Creates short, walking-friendly speech output strings
    from perception results.
    """

    INTRO = (
        "Camera activated. I will describe your surroundings as you walk, "
        "including people, objects, and estimated distances."
    )
    STOPPED = "Okay, I stopped speaking."
    HAZARD = "Caution: Potential road hazard ahead in the center."
    CLEAR = "Clear surroundings ahead."

    # -------------------------------
    # Stable label
    @staticmethod
    def stable(label: str, distance: float | None = None) -> str:
        if not label or label == NOTHING_LABEL:
            return ""
        if distance is None or distance <= 0:
            return f"Detected {label}."
        meters = round_distance(distance)
        if label == "person":
            return f"Person at {meters:g} meters."
        return f"Detected {label} at {meters:g} meters."

    # -------------------------------
    # Surroundings
    @staticmethod
    def surroundings(surroundings: Surroundings, closest_distance: float = 0.0) -> str:
        if surroundings.is_empty():
            return SpeechFormatter.CLEAR

        parts: list[str] = ["Surroundings:"]
        if surroundings.left:
            parts.append(f"{', '.join(surroundings.left)} on your left.")
        if surroundings.center:
            parts.append(f"{', '.join(surroundings.center)} in front.")
        if surroundings.right:
            parts.append(f"{', '.join(surroundings.right)} on your right.")
        if closest_distance > 0:
            parts.append(f"Closest object about {round_distance(closest_distance):g} meters away.")
        return " ".join(parts)

    @staticmethod
    def describe(snapshot: PerceptionSnapshot) -> str:
        return SpeechFormatter.surroundings(snapshot.surroundings, snapshot.current_distance)
