# capability.py

import os
import re
import sys
import logging
import platform
from dataclasses import dataclass
from typing import Optional

import psutil
import pygame

from logger_setup import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# Conservative fallbacks for signals the host does not report.
DEFAULT_CORES = 2
DEFAULT_MEMORY_GB = 4.0
DEFAULT_PIXEL_RATIO = 1.0

# SDL drivers that render without hardware acceleration.
SOFTWARE_VIDEO_DRIVERS = ("dummy", "offscreen")

_PHONE_PATTERN = re.compile(r"iphone|ipod|windows phone|mobile", re.IGNORECASE)
_TABLET_PATTERN = re.compile(r"ipad|tablet|android", re.IGNORECASE)


@dataclass(frozen=True)
class DeviceSignals:
    """
    Coarse, read-once description of the host.

    Data Contract:
    - platform (str): Declared platform string, matched case-insensitively.
    - cores (int): Estimated logical core count.
    - memory_gb (float): Estimated installed memory.
    - pixel_ratio (float): Reported display pixel ratio.
    - webgl (bool): Whether hardware-accelerated drawing is available.
    """
    platform: str = ""
    cores: int = DEFAULT_CORES
    memory_gb: float = DEFAULT_MEMORY_GB
    pixel_ratio: float = DEFAULT_PIXEL_RATIO
    webgl: bool = False

    @classmethod
    def from_mapping(cls, raw: dict):
        """Builds signals from a loose mapping, treating None and non-positive numbers as absent."""
        return cls(
            platform=str(raw.get('platform') or ""),
            cores=int(_positive_or(raw.get('cores'), DEFAULT_CORES)),
            memory_gb=float(_positive_or(raw.get('memory_gb'), DEFAULT_MEMORY_GB)),
            pixel_ratio=float(_positive_or(raw.get('pixel_ratio'), DEFAULT_PIXEL_RATIO)),
            webgl=bool(raw.get('webgl') or False),
        )


def _positive_or(value, default):
    if value is None or value <= 0:
        return default
    return value


@dataclass(frozen=True)
class TierSpec:
    """One row of the tier table, before it is resolved against a device."""
    name: str
    complexity: float
    target_fps: int
    pixel_ratio_cap: float
    max_particles: int
    max_shapes: int

    def resolve(self, signals: DeviceSignals):
        return CapabilityProfile(
            tier=self.name,
            complexity=self.complexity,
            target_fps=self.target_fps,
            pixel_ratio=min(signals.pixel_ratio, self.pixel_ratio_cap),
            max_particles=self.max_particles,
            max_shapes=self.max_shapes,
        )


@dataclass(frozen=True)
class CapabilityProfile:
    """
    The quality tier selected for this session. Chosen once at startup and
    never mutated; every scene reads it to scale its drawing effort.
    """
    tier: str
    complexity: float
    target_fps: int
    pixel_ratio: float
    max_particles: int
    max_shapes: int

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.target_fps


def _is_phone(signals: DeviceSignals) -> bool:
    return bool(_PHONE_PATTERN.search(signals.platform))


def _is_tablet(signals: DeviceSignals) -> bool:
    return bool(_TABLET_PATTERN.search(signals.platform))


def _is_low_end(signals: DeviceSignals) -> bool:
    return signals.cores <= 2 or signals.memory_gb <= 4 or not signals.webgl


def _is_mid_range(signals: DeviceSignals) -> bool:
    return signals.cores <= 6 or signals.memory_gb <= 8


def _always(signals: DeviceSignals) -> bool:
    return True


# Evaluated top to bottom; the first matching predicate wins.
TIER_RULES = (
    (_is_phone, TierSpec("mobile-phone", 0.4, 30, 1.5, 60, 8)),
    (_is_tablet, TierSpec("tablet", 0.6, 45, 2.0, 100, 12)),
    (_is_low_end, TierSpec("low-end-desktop", 0.6, 45, 1.0, 120, 14)),
    (_is_mid_range, TierSpec("mid-range-desktop", 0.8, 60, 1.5, 200, 20)),
    (_always, TierSpec("high-end-desktop", 1.0, 60, 2.0, 300, 30)),
)


def select_profile(signals: DeviceSignals, rules=TIER_RULES) -> CapabilityProfile:
    """
    Picks the capability profile for a device.

    Data Contract:
    - Inputs:
        - signals (DeviceSignals): The host description.
        - rules (sequence): Ordered (predicate, TierSpec) pairs. The last
          predicate is expected to always match.
    - Outputs: The resolved CapabilityProfile of the first matching rule.
    - Invariants: The profile's pixel ratio never exceeds signals.pixel_ratio.
    """
    for predicate, spec in rules:
        if predicate(signals):
            profile = spec.resolve(signals)
            logger.info(
                f"Capability tier '{profile.tier}' selected "
                f"(cores={signals.cores}, memory={signals.memory_gb:.1f}GB, "
                f"pixel_ratio={profile.pixel_ratio}, accelerated={signals.webgl}, "
                f"target_fps={profile.target_fps})"
            )
            return profile
    raise ValueError("No tier rule matched; the rule table must end with a catch-all.")


def probe_signals(overrides: Optional[dict] = None) -> DeviceSignals:
    """
    Reads the host once and merges config overrides on top.
    Must run after pygame.display has been initialised so the driver is known.
    """
    overrides = overrides or {}
    try:
        driver = pygame.display.get_driver()
    except pygame.error:
        driver = ""

    probed = {
        'platform': f"{sys.platform} {platform.platform()}",
        'cores': os.cpu_count(),
        'memory_gb': psutil.virtual_memory().total / (1024 ** 3),
        'pixel_ratio': None,
        'webgl': driver not in SOFTWARE_VIDEO_DRIVERS and driver != "",
    }
    for key, value in overrides.items():
        if value is not None:
            probed[key] = value

    signals = DeviceSignals.from_mapping(probed)
    logger.debug(f"Device signals: {signals} (video driver: {driver or 'none'})")
    return signals
