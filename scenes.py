# scenes.py

"""
Scene Registry

Every pattern layer is a callable `layer(surface, clock, pointer, profile)`
that draws straight onto the surface and returns nothing. A Scene is an
ordered tuple of layers rendered in the same frame. Each variant exposes a
fixed list of five scenes, selected by index.

Drawing effort scales with profile.complexity and is capped by
profile.max_shapes; stroke widths scale with profile.pixel_ratio.
"""

import math
import logging
from collections import namedtuple

import numba
import numpy as np
import pygame

import constants
from capability import CapabilityProfile
from logger_setup import LOGGER_NAME
from palette import cycle_color, hsl_to_rgb_array, hue_color
from particle_system import ParticlePool, target_count

logger = logging.getLogger(LOGGER_NAME)

Scene = namedtuple('Scene', ['name', 'layers'])


# --- JIT-Compiled Pixel Fields ---
# Fields are indexed [column, row] to match pygame.surfarray's (x, y) layout.

@numba.jit(nopython=True, fastmath=True)
def _wave_field_jit(cols, rows, stride, width, height, clock, sources):
    """Mean of `sources` radial sine waves whose centres drift with the clock."""
    field = np.zeros((cols, rows))
    for c in range(cols):
        x = c * stride
        for r in range(rows):
            y = r * stride
            value = 0.0
            for w in range(sources):
                wave_x = width * (0.2 + w * 0.15)
                wave_y = height * (0.3 + math.sin(w + clock) * 0.2)
                dx = x - wave_x
                dy = y - wave_y
                dist = math.sqrt(dx * dx + dy * dy)
                value += math.sin(dist * 0.05 - clock * 2) * 0.5 + 0.5
            field[c, r] = value / sources
    return field


@numba.jit(nopython=True, fastmath=True)
def _julia_field_jit(cols, rows, stride, width, height, zoom, offset_x, offset_y, cr, ci, max_iterations):
    """Escape-time iteration counts of z -> z^2 + c over the visible plane."""
    counts = np.zeros((cols, rows), dtype=np.int32)
    for c in range(cols):
        for r in range(rows):
            x = (c * stride - width / 2) / (0.3 * zoom * width) + offset_x
            y = (r * stride - height / 2) / (0.3 * zoom * height) + offset_y
            iteration = 0
            while x * x + y * y <= 4 and iteration < max_iterations:
                x_temp = x * x - y * y + cr
                y = 2 * x * y + ci
                x = x_temp
                iteration += 1
            counts[c, r] = iteration
    return counts


# --- Helpers ---

def _width(base: float, profile: CapabilityProfile) -> int:
    return max(1, int(round(base * profile.pixel_ratio)))


def _scaled(count: float, profile: CapabilityProfile, floor: int = 1) -> int:
    return max(floor, min(profile.max_shapes, int(round(count * profile.complexity))))


def _stride(base: int, profile: CapabilityProfile) -> int:
    return max(base, int(round(base / profile.complexity)))


def _field_shape(surface: pygame.Surface, stride: int):
    width, height = surface.get_size()
    return math.ceil(width / stride), math.ceil(height / stride)


def _blit_field(surface: pygame.Surface, rgb: np.ndarray, alpha: np.ndarray):
    """Uploads a low-resolution RGBA field and stretches it over the whole surface."""
    cols, rows = alpha.shape
    field = pygame.Surface((cols, rows), pygame.SRCALPHA)
    pixels = pygame.surfarray.pixels3d(field)
    pixels[...] = rgb
    del pixels
    pixels_alpha = pygame.surfarray.pixels_alpha(field)
    pixels_alpha[...] = alpha
    del pixels_alpha
    surface.blit(pygame.transform.scale(field, surface.get_size()), (0, 0))


def pulse_scale(clock: float) -> float:
    return 1 + 0.2 * abs(math.sin(clock * constants.PULSE_FREQ * constants.TWO_PI))


def _pseudo_random(i: int, j: int, seed: float) -> float:
    """Stable per-pair noise in [0, 1) so sparse links flicker with the clock, not the RNG."""
    value = math.sin(i * 12.9898 + j * 78.233 + seed) * 43758.5453
    return value - math.floor(value)


# --- Classic Variant ---

def draw_flow_field(surface, clock, pointer, profile):
    width, height = surface.get_size()
    grid = _stride(40, profile)
    flow_scale = 0.003
    length = 20
    layer = pygame.Surface((width, height), pygame.SRCALPHA)

    for x in range(0, width, grid):
        for y in range(0, height, grid):
            angle = (math.sin(x * flow_scale + clock) *
                     math.cos(y * flow_scale + clock) * constants.TWO_PI)
            end = (x + math.cos(angle) * length, y + math.sin(angle) * length)
            hue = (clock * 30 + x * 0.5 + y * 0.25) % 360
            pygame.draw.line(layer, hue_color(hue, 0.6), (x, y), end, _width(3, profile))

    surface.blit(layer, (0, 0))


class ParticleNexus:
    """
    Particle swarm scene. Owns its pool exclusively; the live count follows
    the pointer height every frame.
    """
    def __init__(self, profile: CapabilityProfile, rng: np.random.Generator, bounds: tuple):
        self.pool = ParticlePool(profile.max_particles, rng, bounds)

    def __call__(self, surface, clock, pointer, profile):
        self.pool.set_bounds(surface.get_size())
        self.pool.resize(target_count(profile.max_particles, pointer.y))
        self.pool.update(pointer.x)
        self.pool.draw(surface, clock, _width(1, profile))


def draw_geometric_morph(surface, clock, pointer, profile, segments=12):
    """Layered polygons mirrored around the centre like a kaleidoscope."""
    width, height = surface.get_size()
    center_x, center_y = width / 2, height / 2
    sides = 3 + int(math.floor(pointer.x * 8))
    sides = max(3, sides)
    radius = 100 + math.sin(clock) * 50
    rotation = clock * 0.5
    layers = min(5, _scaled(5, profile))
    canvas = pygame.Surface((width, height), pygame.SRCALPHA)

    for segment in range(segments):
        turn = constants.TWO_PI * segment / segments
        cos_t, sin_t = math.cos(turn), math.sin(turn)
        mirror = -1 if segment % 2 == 0 else 1

        for layer in range(layers):
            layer_radius = radius * (1 + layer * 0.3)
            color = hue_color((clock * 20 + layer * 60) % 360, 0.8 - layer * 0.15)
            points = []
            for i in range(sides):
                angle = (i / sides) * constants.TWO_PI + rotation
                px = math.cos(angle) * layer_radius
                py = math.sin(angle) * layer_radius * mirror
                points.append((center_x + px * cos_t - py * sin_t,
                               center_y + px * sin_t + py * cos_t))
            pygame.draw.polygon(canvas, color, points, _width(max(1.0, 3 - layer * 0.4), profile))

    surface.blit(canvas, (0, 0))


def draw_wave_interference(surface, clock, pointer, profile):
    width, height = surface.get_size()
    if width == 0 or height == 0:
        return
    stride = _stride(2, profile)
    cols, rows = _field_shape(surface, stride)
    field = _wave_field_jit(cols, rows, stride, float(width), float(height), clock, constants.WAVE_SOURCES)
    hue = np.mod(field * 360 + clock * 30, 360) / 360.0
    rgb = hsl_to_rgb_array(hue, 1.0, 0.5)
    _blit_field(surface, rgb, np.full((cols, rows), 255, dtype=np.uint8))


def draw_vortex_tunnel(surface, clock, pointer, profile):
    width, height = surface.get_size()
    center_x, center_y = width / 2, height / 2
    max_radius = max(width, height)
    step = _stride(10, profile)
    layer = pygame.Surface((width, height), pygame.SRCALPHA)

    for radius in range(max_radius, 0, -step):
        segments = max(3, radius // 5)
        rotation = clock + (max_radius - radius) * 0.01
        twist = math.sin(radius * 0.02 + clock) * 0.5
        color = hue_color(((max_radius - radius) / max_radius * 360 + clock * 20) % 360, 0.3)
        points = []
        for i in range(segments):
            angle = (i / segments) * constants.TWO_PI + rotation + twist
            points.append((center_x + math.cos(angle) * radius, center_y + math.sin(angle) * radius))
        pygame.draw.lines(layer, color, True, points, _width(2, profile))

    surface.blit(layer, (0, 0))


# --- Aggressive Variant ---

def draw_spinning_polygons(surface, clock, pointer, profile):
    width, height = surface.get_size()
    center_x, center_y = width / 2, height / 2
    num_layers = _scaled(15 + math.floor(pointer.y * 20), profile)
    pulse = pulse_scale(clock)
    fills = pygame.Surface((width, height), pygame.SRCALPHA)

    for layer in range(num_layers):
        sides = 3 + layer % 6
        radius = (30 + layer * 40) * pulse * (0.8 + pointer.x * 0.5)
        speed = (1 if layer % 2 else -1) * (0.15 + layer * 0.03)
        rotation = clock * speed
        points = [
            (center_x + math.cos(rotation + (i / sides) * constants.TWO_PI) * radius,
             center_y + math.sin(rotation + (i / sides) * constants.TWO_PI) * radius)
            for i in range(sides)
        ]
        color = cycle_color(clock, layer / num_layers)
        pygame.draw.polygon(surface, color, points, _width(3 + (num_layers - layer) * 0.8, profile))
        if layer % 3 == 0:
            pygame.draw.polygon(fills, (*color, round(0.1 * 255)), points)

    surface.blit(fills, (0, 0))


def draw_vector_lines(surface, clock, pointer, profile):
    width, height = surface.get_size()
    center_x, center_y = width / 2, height / 2
    num_points = _scaled(20 + math.floor(pointer.x * 20), profile, floor=2)
    radius = min(width, height) / 3
    seed = math.floor(clock * 25)

    points = []
    for i in range(num_points):
        angle = (i / num_points) * constants.TWO_PI + clock * (0.02 + i * 0.005)
        dist = radius * (0.5 + math.sin(clock + i) * 0.3)
        points.append((center_x + math.cos(angle) * dist, center_y + math.sin(angle) * dist))

    for i in range(num_points):
        for j in range(i + 1, num_points):
            if _pseudo_random(i, j, seed) < 0.2:
                line_width = _width(1 + math.sin(clock + i + j) * 0.5, profile)
                pygame.draw.line(surface, cycle_color(clock, (i + j) / (num_points * 2)), points[i], points[j], line_width)


def draw_grey_fractal(surface, clock, pointer, profile):
    width, height = surface.get_size()
    if width == 0 or height == 0:
        return
    stride = _stride(3, profile)
    cols, rows = _field_shape(surface, stride)
    max_iterations = constants.FRACTAL_MAX_ITERATIONS
    zoom = max(0.1, 1.5 + pointer.x + math.sin(clock * 0.1) * 0.5)
    counts = _julia_field_jit(
        cols, rows, stride, float(width), float(height), zoom,
        pointer.x * 0.3, pointer.y * 0.3,
        -0.8 + math.sin(clock * 0.05), 0.27 + math.cos(clock * 0.05),
        max_iterations,
    )
    escaped = counts < max_iterations
    hue = np.mod(counts / max_iterations * 360 + clock * 10, 360) / 360.0
    rgb = hsl_to_rgb_array(hue, 0.8, 0.6)
    alpha = np.where(escaped, np.minimum(255, 128 + counts * 2), 0).astype(np.uint8)
    _blit_field(surface, rgb, alpha)


def draw_symmetry_lines(surface, clock, pointer, profile):
    width, height = surface.get_size()
    center = (width / 2, height / 2)
    num_lines = _scaled(10 + math.floor(pointer.y * 10), profile)
    line_width = _width(1.5 + pulse_scale(clock), profile)

    for i in range(num_lines):
        angle = (i / num_lines) * constants.TWO_PI + clock * 0.03
        length = height * 0.4 * (0.5 + math.sin(clock + i) * 0.3)
        dx, dy = math.cos(angle) * length, math.sin(angle) * length
        color = cycle_color(clock, i / num_lines)
        pygame.draw.line(surface, color, center, (center[0] + dx, center[1] + dy), line_width)
        pygame.draw.line(surface, color, center, (center[0] - dx, center[1] - dy), line_width)


# --- Registry ---

def build_registry(variant: str, profile: CapabilityProfile, rng: np.random.Generator, bounds: tuple):
    """
    Returns the ordered scene list for a variant.

    Data Contract:
    - Inputs:
        - variant (str): 'classic' or 'aggressive'.
        - profile (CapabilityProfile): Sizes the particle pool.
        - rng (np.random.Generator): Seeds the particle pool.
        - bounds (tuple): Initial (width, height) of the drawing area.
    - Outputs: A list of five Scene tuples.
    - Raises: KeyError for an unknown variant.
    """
    if variant == 'classic':
        scenes = [
            Scene('flow-field', (draw_flow_field,)),
            Scene('particle-nexus', (ParticleNexus(profile, rng, bounds),)),
            Scene('geometric-morph', (draw_geometric_morph,)),
            Scene('wave-interference', (draw_wave_interference,)),
            Scene('vortex-tunnel', (draw_vortex_tunnel,)),
        ]
    elif variant == 'aggressive':
        scenes = [
            Scene('polygons+symmetry', (draw_spinning_polygons, draw_symmetry_lines)),
            Scene('vectors+polygons', (draw_vector_lines, draw_spinning_polygons)),
            Scene('fractal', (draw_grey_fractal,)),
            Scene('symmetry+vectors', (draw_symmetry_lines, draw_vector_lines)),
            Scene('everything', (draw_spinning_polygons, draw_vector_lines, draw_symmetry_lines, draw_grey_fractal)),
        ]
    else:
        raise KeyError(f"Unknown variant: {variant}")

    logger.info(f"Scene registry for '{variant}': {[scene.name for scene in scenes]}")
    return scenes
