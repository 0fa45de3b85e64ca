# renderer.py

import math
import logging

import pygame

import constants
from capability import CapabilityProfile
from logger_setup import LOGGER_NAME
from palette import AGGRESSIVE_RGB
from session import SessionState, VariantRules

logger = logging.getLogger(LOGGER_NAME)


class Renderer:
    """
    Paints one accepted frame: the fade-trail overlay, the selected scene's
    layers, and the variant's flash overlay.

    The fade-trail is a low-alpha black fill over the previous frame, so old
    content decays instead of being cleared.
    """
    def __init__(self, registry: list, rules: VariantRules, profile: CapabilityProfile):
        self.registry = registry
        self.rules = rules
        self.profile = profile
        self._overlay = None

    def _overlay_for(self, size):
        if self._overlay is None or self._overlay.get_size() != size:
            self._overlay = pygame.Surface(size, pygame.SRCALPHA)
        return self._overlay

    def fade(self, screen: pygame.Surface):
        overlay = self._overlay_for(screen.get_size())
        overlay.fill((*constants.BLACK, self.rules.fade_alpha))
        screen.blit(overlay, (0, 0))

    def flash(self, screen: pygame.Surface, clock: float):
        """Beat-synced palette flash, drawn when the pulse wave peaks."""
        if math.sin(clock * constants.PULSE_FREQ * constants.TWO_PI) <= constants.FLASH_THRESHOLD:
            return False
        color = AGGRESSIVE_RGB[math.floor(clock * 10) % len(AGGRESSIVE_RGB)]
        overlay = self._overlay_for(screen.get_size())
        overlay.fill((*color, constants.FLASH_ALPHA))
        screen.blit(overlay, (0, 0))
        return True

    def render(self, screen: pygame.Surface, state: SessionState):
        self.fade(screen)
        scene = self.registry[state.scene_index]
        for layer in scene.layers:
            layer(screen, state.clock, state.pointer, self.profile)
        if self.rules.flash:
            self.flash(screen, state.clock)
