import os

# Headless SDL so surfaces and events work without a display.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from capability import CapabilityProfile


@pytest.fixture
def profile():
    return CapabilityProfile(
        tier="mid-range-desktop",
        complexity=0.8,
        target_fps=60,
        pixel_ratio=1.0,
        max_particles=200,
        max_shapes=20,
    )


@pytest.fixture
def low_profile():
    return CapabilityProfile(
        tier="mobile-phone",
        complexity=0.4,
        target_fps=30,
        pixel_ratio=1.0,
        max_particles=60,
        max_shapes=8,
    )


@pytest.fixture
def surface():
    return pygame.Surface((160, 120))
