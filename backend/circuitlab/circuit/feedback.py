"""Success banner selection for the lesson UI."""

from __future__ import annotations

from typing import Iterable

from .schema import Banner, LoadVerdict

BANNER_MESSAGES: dict[Banner, str] = {
    Banner.NONE: "",
    Banner.LIT: "The bulb is lit! You completed the circuit.",
    Banner.SWITCH_CONTROLLED: "Congratulations! You are controlling the bulb with the switch.",
    Banner.SWITCH_BYPASSED: "The bulb is lit, but the switch is not in the circuit. Try wiring the switch in series!",
    Banner.SHORT_CIRCUIT: "Short circuit! The battery poles are connected without passing through a bulb.",
}


def choose_banner(
    verdicts: Iterable[LoadVerdict],
    short_circuit_detected: bool,
    *,
    has_switches: bool,
) -> Banner:
    lit = [v for v in verdicts if v.energized]
    if not lit:
        return Banner.SHORT_CIRCUIT if short_circuit_detected else Banner.NONE
    if not has_switches:
        return Banner.LIT
    if all(v.controlled_by_switch for v in lit):
        return Banner.SWITCH_CONTROLLED
    return Banner.SWITCH_BYPASSED


def banner_message(banner: Banner) -> str:
    return BANNER_MESSAGES[banner]
