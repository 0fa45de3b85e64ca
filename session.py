# session.py

"""
Session State

All mutable state of a running visualizer lives in one immutable SessionState
value. Input events and scheduler steps never modify a state in place; they
return a new one. The functions here are the reducers that do so.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

import constants


@dataclass(frozen=True)
class Pointer:
    """Normalized pointer position. Values outside 0-1 are allowed."""
    x: float = 0.5
    y: float = 0.5


@dataclass(frozen=True)
class SessionState:
    """
    Data Contract:
    - clock (float): Simulation time; advances by a fixed step per accepted frame.
    - pointer (Pointer): Latest pointer/touch position, or the auto-rotate path.
    - scene_index (int): Index into the scene registry, always in [0, N).
    - interacting (bool): A move was seen and has not yet been consumed by a
      touch-end or idle revert.
    - last_move_time (float | None): Clock value of the last real move.
    - last_accepted_ms (float): Throttle marker, in callback milliseconds.
    - frame_count (int): Accepted frames so far.
    - observed_fps (float): Diagnostic, refreshed every FPS_SAMPLE_FRAMES frames.
    """
    clock: float = 0.0
    pointer: Pointer = Pointer()
    scene_index: int = 0
    interacting: bool = False
    last_move_time: Optional[float] = None
    last_accepted_ms: float = 0.0
    frame_count: int = 0
    observed_fps: float = 0.0


@dataclass(frozen=True)
class VariantRules:
    """How a visual variant paces its clock and changes scenes on its own."""
    name: str
    clock_step: float
    fade_alpha: int
    advance_on_touch_end: bool = False
    auto_cycle_interval: Optional[float] = None
    idle_revert_threshold: Optional[float] = None
    flash: bool = False


CLASSIC = VariantRules(
    name="classic",
    clock_step=constants.CLASSIC_CLOCK_STEP,
    fade_alpha=constants.CLASSIC_FADE_ALPHA,
)

AGGRESSIVE = VariantRules(
    name="aggressive",
    clock_step=constants.AGGRESSIVE_CLOCK_STEP,
    fade_alpha=constants.AGGRESSIVE_FADE_ALPHA,
    advance_on_touch_end=True,
    auto_cycle_interval=constants.AUTO_CYCLE_INTERVAL,
    idle_revert_threshold=constants.IDLE_REVERT_THRESHOLD,
    flash=True,
)

VARIANTS = {rules.name: rules for rules in (CLASSIC, AGGRESSIVE)}


def pointer_moved(state: SessionState, x: float, y: float) -> SessionState:
    return replace(
        state,
        pointer=Pointer(x, y),
        interacting=True,
        last_move_time=state.clock,
    )


def advance_scene(state: SessionState, count: int) -> SessionState:
    return replace(state, scene_index=(state.scene_index + 1) % count)


def touch_ended(state: SessionState, rules: VariantRules, count: int) -> SessionState:
    """A lifted finger ends the interaction and, in some variants, moves on a scene."""
    if rules.advance_on_touch_end:
        state = advance_scene(state, count)
    return replace(state, interacting=False)


def auto_rotate_pointer(t: float) -> Pointer:
    return Pointer(
        constants.AUTO_ROTATE_CENTER + constants.AUTO_ROTATE_AMPLITUDE * math.sin(constants.AUTO_ROTATE_FREQ_X * t),
        constants.AUTO_ROTATE_CENTER + constants.AUTO_ROTATE_AMPLITUDE * math.cos(constants.AUTO_ROTATE_FREQ_Y * t),
    )


def auto_rotate_armed(state: SessionState, idle: float) -> bool:
    if state.last_move_time is None:
        return True
    return state.clock - state.last_move_time > idle


def apply_scene_rules(state: SessionState, previous_clock: float, rules: VariantRules, count: int) -> SessionState:
    """
    Applies the variant's automatic scene changes after the clock has advanced
    from previous_clock to state.clock.

    Auto-cycle fires once each time the clock crosses a multiple of the cycle
    interval. Idle revert fires once per interaction, when the pointer has been
    still for longer than the threshold.
    Both are checked on every frame, so when they coincide the scene moves
    on twice.
    """
    if rules.auto_cycle_interval:
        crossed = (math.floor(state.clock / rules.auto_cycle_interval)
                   > math.floor(previous_clock / rules.auto_cycle_interval))
        if crossed:
            state = advance_scene(state, count)

    if (rules.idle_revert_threshold is not None and state.interacting
            and state.last_move_time is not None
            and state.clock - state.last_move_time > rules.idle_revert_threshold):
        state = replace(advance_scene(state, count), interacting=False)

    return state
