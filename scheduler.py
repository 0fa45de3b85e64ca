# scheduler.py

import logging
from dataclasses import replace

import constants
from capability import CapabilityProfile
from logger_setup import LOGGER_NAME
from session import SessionState, VariantRules, apply_scene_rules, auto_rotate_armed, auto_rotate_pointer

logger = logging.getLogger(LOGGER_NAME)


class Scheduler:
    """
    Throttles a display-rate callback down to the tier's target frame rate and
    advances the session by one step per accepted frame.

    The platform callback keeps firing at the display refresh rate; callbacks
    that arrive before a full frame interval has accumulated are skipped. When
    a frame is accepted the throttle marker moves forward by whole intervals
    only, so the remainder carries into the next frame and the long-run rate
    does not drift.

    Data Contract:
    - Inputs:
        - profile (CapabilityProfile): Supplies the target frame interval.
        - rules (VariantRules): Clock step and automatic scene changes.
        - scene_count (int): Length of the scene registry.
        - auto_rotate_idle (float): Clock units without input before the
          pointer follows the auto-rotate path again.
    - Outputs: New SessionState values; the scheduler holds no session state.
    - Invariants: render is called at most once per step, and only on an
      accepted frame.
    """
    def __init__(self, profile: CapabilityProfile, rules: VariantRules, scene_count: int,
                 auto_rotate_idle: float = constants.AUTO_ROTATE_IDLE):
        self.profile = profile
        self.rules = rules
        self.scene_count = scene_count
        self.auto_rotate_idle = auto_rotate_idle
        self.interval = profile.frame_interval_ms

        logger.info(
            f"Scheduler created: variant={rules.name}, target_fps={profile.target_fps}, "
            f"interval={self.interval:.2f}ms, scenes={scene_count}."
        )

    def throttle(self, state: SessionState, now_ms: float):
        """
        Decides whether the callback at now_ms renders a frame.
        Returns (accepted, state); the state only changes when accepted.
        """
        elapsed = now_ms - state.last_accepted_ms
        if elapsed < self.interval:
            return False, state

        frame_count = state.frame_count + 1
        observed_fps = state.observed_fps
        if frame_count % constants.FPS_SAMPLE_FRAMES == 0 and elapsed > 0:
            observed_fps = 1000.0 / elapsed
            logger.debug(f"Frame {frame_count}: observed {observed_fps:.1f} fps (target {self.profile.target_fps}).")

        state = replace(
            state,
            last_accepted_ms=now_ms - (elapsed % self.interval),
            frame_count=frame_count,
            observed_fps=observed_fps,
        )
        return True, state

    def step(self, state: SessionState, now_ms: float, render=None):
        """
        Runs one platform callback.

        On an accepted frame: advances the clock by the fixed variant step,
        moves the pointer along the auto-rotate path when no one is
        interacting, applies the variant's scene rules and finally calls
        render(state) with the new state.

        Returns (state, accepted).
        """
        accepted, state = self.throttle(state, now_ms)
        if not accepted:
            return state, False

        previous_clock = state.clock
        state = replace(state, clock=previous_clock + self.rules.clock_step)

        if auto_rotate_armed(state, self.auto_rotate_idle):
            state = replace(state, pointer=auto_rotate_pointer(state.clock))

        scene_before = state.scene_index
        state = apply_scene_rules(state, previous_clock, self.rules, self.scene_count)
        if state.scene_index != scene_before:
            logger.debug(f"Scene changed automatically: {scene_before} -> {state.scene_index} at t={state.clock:.2f}.")

        if render is not None:
            render(state)
        return state, True
