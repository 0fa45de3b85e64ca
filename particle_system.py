# particle_system.py

import math
import logging

import numba
import numpy as np
import pygame

import constants
from logger_setup import LOGGER_NAME
from palette import hue_color

logger = logging.getLogger(LOGGER_NAME)

# --- JIT-Compiled Kernels ---
# Kept outside the ParticlePool class and restricted to NumPy arrays and
# scalars, as required by Numba's nopython mode.

@numba.jit(nopython=True, fastmath=True)
def _count_links_jit(positions, count, threshold):
    """First pass of the proximity test: how many pairs are closer than threshold."""
    threshold_sq = threshold * threshold
    links = 0
    for i in range(count):
        for j in range(i + 1, count):
            dx = positions[i, 0] - positions[j, 0]
            dy = positions[i, 1] - positions[j, 1]
            if dx * dx + dy * dy < threshold_sq:
                links += 1
    return links


@numba.jit(nopython=True, fastmath=True)
def _fill_links_jit(positions, count, threshold, pairs, alphas):
    """
    Second pass: records each close pair once (i < j) with an alpha that
    falls linearly from 1 at zero separation to 0 at the threshold.
    """
    threshold_sq = threshold * threshold
    k = 0
    for i in range(count):
        for j in range(i + 1, count):
            dx = positions[i, 0] - positions[j, 0]
            dy = positions[i, 1] - positions[j, 1]
            dist_sq = dx * dx + dy * dy
            if dist_sq < threshold_sq:
                pairs[k, 0] = i
                pairs[k, 1] = j
                alphas[k] = 1.0 - math.sqrt(dist_sq) / threshold
                k += 1


def target_count(max_particles: int, pointer_y: float) -> int:
    """Pool size for a pointer height: floor(max_particles * clamp(y, 0, 1))."""
    return int(math.floor(max_particles * min(1.0, max(0.0, pointer_y))))


class ParticlePool:
    """
    A fixed-capacity arena of particles stored as parallel NumPy arrays
    (Structure of Arrays). The first `active` slots are live; resizing only
    moves that boundary and re-seeds newly activated slots in place.

    Data Contract:
    - Inputs:
        - capacity (int): Maximum particles, normally the tier's max_particles.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the drawing area.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Owns the lifecycle of all particle data.
    - Invariants: 0 <= active <= capacity. All arrays keep length `capacity`
      for the life of the pool.
    """
    def __init__(self, capacity: int, rng: np.random.Generator, bounds: tuple):
        self.capacity = capacity
        self.rng = rng
        self.bounds = np.array(bounds, dtype=float)
        self.active = 0

        self.positions = np.zeros((capacity, 2), dtype=float)
        self.angles = np.zeros(capacity, dtype=float)
        self.speeds = np.zeros(capacity, dtype=float)
        self.lives = np.zeros(capacity, dtype=float)
        self.sizes = np.zeros(capacity, dtype=float)
        self.hues = np.zeros(capacity, dtype=float)

        logger.info(f"ParticlePool created with capacity {capacity}.")

    def set_bounds(self, bounds: tuple):
        self.bounds = np.array(bounds, dtype=float)

    def _reset(self, indices: np.ndarray):
        """Re-seeds the given slots with a fresh random state."""
        n = len(indices)
        if n == 0:
            return
        self.positions[indices] = self.rng.random((n, 2)) * self.bounds
        self.angles[indices] = self.rng.uniform(0.0, constants.TWO_PI, n)
        self.speeds[indices] = self.rng.uniform(constants.PARTICLE_MIN_SPEED, constants.PARTICLE_MAX_SPEED, n)
        self.lives[indices] = self.rng.uniform(0.5, 1.0, n)
        self.sizes[indices] = self.rng.uniform(constants.PARTICLE_MIN_SIZE, constants.PARTICLE_MAX_SIZE, n)
        self.hues[indices] = self.rng.uniform(0.0, 360.0, n)

    def resize(self, target: int):
        """
        Grows or shrinks the live prefix to `target` slots, clamped to capacity.
        Newly activated slots are reset; dropped slots are simply ignored.
        """
        target = max(0, min(self.capacity, target))
        if target > self.active:
            self._reset(np.arange(self.active, target))
        self.active = target

    def update(self, pointer_x: float):
        """
        Advances every live particle one tick.

        Angles are steered by the pointer's horizontal deviation from centre,
        positions move along the angle at each particle's speed, and life
        decays. Particles that expire or leave the drawing area are reset in
        place.
        """
        n = self.active
        if n == 0:
            return

        self.angles[:n] += (pointer_x - 0.5) * constants.PARTICLE_STEER_RATE
        self.positions[:n, 0] += np.cos(self.angles[:n]) * self.speeds[:n]
        self.positions[:n, 1] += np.sin(self.angles[:n]) * self.speeds[:n]
        self.lives[:n] -= constants.PARTICLE_LIFE_DECAY

        out_of_bounds = (
            (self.positions[:n, 0] < 0) | (self.positions[:n, 0] > self.bounds[0]) |
            (self.positions[:n, 1] < 0) | (self.positions[:n, 1] > self.bounds[1])
        )
        expired = self.lives[:n] <= 0
        self._reset(np.where(out_of_bounds | expired)[0])

    def connections(self, threshold: float = constants.PARTICLE_LINK_DISTANCE):
        """
        O(n^2) proximity test over live particles.
        Returns (pairs, alphas): an (m, 2) int array of index pairs and their
        line alphas in (0, 1].
        """
        n = self.active
        links = _count_links_jit(self.positions, n, threshold)
        pairs = np.zeros((links, 2), dtype=np.int32)
        alphas = np.zeros(links, dtype=float)
        if links:
            _fill_links_jit(self.positions, n, threshold, pairs, alphas)
        return pairs, alphas

    def draw(self, screen: pygame.Surface, hue_shift: float, line_width: int = 1):
        """
        Draws the live particles and their proximity links.
        Both go onto one SRCALPHA layer so their alpha blends with the trails;
        a particle fades out as its life runs down.
        """
        n = self.active
        if n == 0:
            return

        layer = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        pairs, alphas = self.connections()
        for (i, j), alpha in zip(pairs, alphas):
            color = hue_color(self.hues[i] + hue_shift * 10, alpha * 0.2)
            pygame.draw.line(
                layer, color,
                (int(self.positions[i, 0]), int(self.positions[i, 1])),
                (int(self.positions[j, 0]), int(self.positions[j, 1])),
                line_width,
            )
        for i in range(n):
            color = hue_color(self.hues[i] + hue_shift * 10, min(1.0, self.lives[i] + 0.3))
            pygame.draw.circle(
                layer,
                color,
                (int(self.positions[i, 0]), int(self.positions[i, 1])),
                max(1, int(self.sizes[i])),
            )
        screen.blit(layer, (0, 0))
