# main.py

import sys
import json
import logging

import numpy as np
import pygame

import constants
import logger_setup
from capability import probe_signals, select_profile
from renderer import Renderer
from scenes import build_registry
from scheduler import Scheduler
from session import SessionState, VARIANTS, advance_scene, pointer_moved, touch_ended

# Get the application's dedicated logger
logger = logging.getLogger(logger_setup.LOGGER_NAME)

SURFACE_MISSING_NOTICE = "Psy Visualizer could not open a drawing surface. Nothing will be rendered."


class SurfaceUnavailableError(RuntimeError):
    """Raised when no drawing surface can be opened at startup."""


def load_config(config_path='config.json'):
    with open(config_path, 'r') as f:
        return json.load(f)


def open_display(size, strict=True):
    """
    Opens the resizable window that all scenes draw into.

    This is the only fatal condition in the application. On failure the
    cause is logged and a plain-text notice replaces any output; in strict
    mode SurfaceUnavailableError is raised, otherwise None is returned and
    the caller must not start the loop.
    """
    try:
        screen = pygame.display.set_mode(size, pygame.RESIZABLE)
    except pygame.error as exc:
        logger.error(f"Drawing surface unavailable: {exc}")
        sys.stderr.write(SURFACE_MISSING_NOTICE + "\n")
        if strict:
            raise SurfaceUnavailableError(str(exc)) from exc
        return None
    pygame.display.set_caption(constants.TITLE)
    return screen


def handle_event(state: SessionState, event, size, rules, scene_count):
    """
    Maps one pygame input event onto the session reducers.
    Returns the new state; unrelated events return the state unchanged.
    """
    width, height = max(1, size[0]), max(1, size[1])

    if event.type == pygame.MOUSEMOTION and not getattr(event, 'touch', False):
        return pointer_moved(state, event.pos[0] / width, event.pos[1] / height)
    if event.type == pygame.FINGERMOTION:
        # Finger coordinates are already normalized to the window.
        return pointer_moved(state, event.x, event.y)
    if event.type == pygame.FINGERUP:
        return touch_ended(state, rules, scene_count)
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        # A tap that also ends a touch already advanced on FINGERUP.
        if getattr(event, 'touch', False) and rules.advance_on_touch_end:
            return state
        return advance_scene(state, scene_count)
    return state


def run_loop(screen, scheduler, renderer, state, display_hz):
    """
    The main loop. Each iteration stands in for one display-rate callback:
    events are drained, the scheduler decides whether to render, and the
    clock paces the next callback. Runs until the window is closed.
    """
    clock = pygame.time.Clock()
    start_ticks = pygame.time.get_ticks()
    last_scene = state.scene_index

    def render(frame_state):
        renderer.render(screen, frame_state)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                logger.info(f"Window resized to {event.w}x{event.h}.")
            else:
                state = handle_event(state, event, screen.get_size(), scheduler.rules, scheduler.scene_count)

        if not running:
            break

        now_ms = pygame.time.get_ticks() - start_ticks
        state, accepted = scheduler.step(state, now_ms, render)
        if accepted:
            pygame.display.flip()
            if state.scene_index != last_scene:
                logger.info(f"Scene {state.scene_index}: {renderer.registry[state.scene_index].name}")
                last_scene = state.scene_index

        clock.tick(display_hz)

    return state


def main(config_path='config.json'):
    """
    Initializes and runs the visualizer.
    """
    # --- Setup ---
    logger_setup.setup_logging(config_path)
    config = load_config(config_path)
    session_config = config.get('session', {})

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    rules = VARIANTS[session_config.get('variant', 'classic')]
    size = tuple(session_config.get('window', (constants.WIDTH, constants.HEIGHT)))

    # --- Initialization ---
    pygame.init()
    screen = open_display(size, strict=session_config.get('strict_startup', True))
    if screen is None:
        logger.warning("Startup aborted; the render loop was not started.")
        pygame.quit()
        return None

    # The profile is chosen exactly once and shared read-only from here on.
    profile = select_profile(probe_signals(config.get('device')))

    registry = build_registry(rules.name, profile, rng, screen.get_size())
    renderer = Renderer(registry, rules, profile)
    scheduler = Scheduler(
        profile, rules, len(registry),
        auto_rotate_idle=session_config.get('auto_rotate_idle', constants.AUTO_ROTATE_IDLE),
    )

    screen.fill(constants.BLACK)
    state = run_loop(screen, scheduler, renderer, SessionState(),
                     session_config.get('display_hz', constants.DISPLAY_HZ))

    logger.info(f"Application shutting down after {state.frame_count} frames.")
    pygame.quit()
    return state


if __name__ == "__main__":
    main()
