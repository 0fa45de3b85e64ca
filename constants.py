# constants.py

"""
Application Constants

This module defines static configuration values for the visualizer's framework.
These are not expected to change between sessions. Device-dependent values live
in the tier table in capability.py, not here.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable. "Clock units" refers to the
  simulation clock, which advances by a fixed step per accepted frame.
"""

import math

# Screen dimensions
WIDTH = 1280  # Pixels
HEIGHT = 720  # Pixels

# The rate the platform callback fires at, independent of any tier's target.
DISPLAY_HZ = 60  # Callbacks per second

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Window Title
TITLE = "Psy Visualizer"

# Simulation clock increments per accepted frame.
CLASSIC_CLOCK_STEP = 0.02
AGGRESSIVE_CLOCK_STEP = 0.04

# Visual Effects
# RGBA alpha of the per-frame black overlay. Lower = longer trails.
CLASSIC_FADE_ALPHA = round(0.08 * 255)
AGGRESSIVE_FADE_ALPHA = round(0.05 * 255)

# Scheduler diagnostics
FPS_SAMPLE_FRAMES = 60  # Accepted frames between observed-fps refreshes

# Auto-rotate path: (CENTER + AMP*sin(FREQ_X*t), CENTER + AMP*cos(FREQ_Y*t))
AUTO_ROTATE_CENTER = 0.5
AUTO_ROTATE_AMPLITUDE = 0.3
AUTO_ROTATE_FREQ_X = 0.3
AUTO_ROTATE_FREQ_Y = 0.2
AUTO_ROTATE_IDLE = 3.0  # Clock units without input before auto-rotate re-arms

# Aggressive mode
AGGRESSIVE_PALETTE = [
    "#00FFFF", "#FF00FF", "#FFFF00", "#FF4500",
    "#9370DB", "#00FF00", "#FF1493", "#FFD700",
]
COLOR_SWAP_SPEED = 0.1
TEMPO = 128 / 60  # Beats per second
PULSE_FREQ = TEMPO * 8
FLASH_THRESHOLD = 0.85
FLASH_ALPHA = round(0.3 * 255)
AUTO_CYCLE_INTERVAL = 10.0  # Clock units between automatic scene changes
IDLE_REVERT_THRESHOLD = 0.3  # Clock units after the last move

# Particles
PARTICLE_LINK_DISTANCE = 100.0  # Pixels
PARTICLE_LIFE_DECAY = 0.005  # Life lost per tick; life starts in (0.5, 1.0]
PARTICLE_STEER_RATE = 0.08  # Radians per tick at full horizontal deflection
PARTICLE_MIN_SPEED = 0.5  # Pixels per tick
PARTICLE_MAX_SPEED = 2.5
PARTICLE_MIN_SIZE = 2.0  # Pixels
PARTICLE_MAX_SIZE = 6.0

# Pixel-field scenes
FRACTAL_MAX_ITERATIONS = 80
WAVE_SOURCES = 5

TWO_PI = 2 * math.pi
