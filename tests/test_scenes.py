import numpy as np
import pygame
import pytest

from scenes import (
    ParticleNexus,
    Scene,
    build_registry,
    draw_flow_field,
    draw_grey_fractal,
    draw_wave_interference,
    pulse_scale,
)
from session import Pointer


def all_layers(profile):
    rng = np.random.default_rng(3)
    layers = []
    for variant in ("classic", "aggressive"):
        for scene in build_registry(variant, profile, rng, (160, 120)):
            layers.extend(scene.layers)
    return layers


@pytest.mark.parametrize("variant", ["classic", "aggressive"])
def test_registry_has_five_scenes(variant, profile):
    registry = build_registry(variant, profile, np.random.default_rng(0), (160, 120))
    assert len(registry) == 5
    assert all(isinstance(scene, Scene) for scene in registry)
    assert all(1 <= len(scene.layers) <= 4 for scene in registry)


def test_aggressive_combinations(profile):
    registry = build_registry("aggressive", profile, np.random.default_rng(0), (160, 120))
    assert [len(scene.layers) for scene in registry] == [2, 2, 1, 2, 4]


def test_unknown_variant(profile):
    with pytest.raises(KeyError):
        build_registry("mellow", profile, np.random.default_rng(0), (160, 120))


def test_every_layer_draws_something(profile):
    for layer in all_layers(profile):
        surface = pygame.Surface((160, 120))
        layer(surface, 3.7, Pointer(0.6, 0.7), profile)
        assert pygame.surfarray.array3d(surface).any(), layer


@pytest.mark.parametrize("pointer", [Pointer(-2.0, 5.0), Pointer(0.0, 0.0), Pointer(1.0, 1.0)])
def test_layers_tolerate_extreme_pointers(pointer, low_profile):
    surface = pygame.Surface((160, 120))
    for layer in all_layers(low_profile):
        layer(surface, 12.5, pointer, low_profile)


def test_layers_tolerate_zero_sized_surface(profile):
    surface = pygame.Surface((0, 0))
    for layer in all_layers(profile):
        layer(surface, 1.0, Pointer(0.5, 0.5), profile)


def test_particle_nexus_tracks_pointer_height(profile):
    nexus = ParticleNexus(profile, np.random.default_rng(1), (160, 120))
    surface = pygame.Surface((160, 120))
    nexus(surface, 0.0, Pointer(0.5, 0.25), profile)
    assert nexus.pool.active == 50
    nexus(surface, 0.02, Pointer(0.5, 0.75), profile)
    assert nexus.pool.active == 150


def test_wave_interference_covers_surface(profile):
    surface = pygame.Surface((161, 121))
    draw_wave_interference(surface, 0.5, Pointer(), profile)
    pixels = pygame.surfarray.array3d(surface)
    assert pixels.reshape(-1, 3).any(axis=1).mean() > 0.95


def test_fractal_leaves_bounded_points_untouched(profile):
    surface = pygame.Surface((90, 90))
    surface.fill((1, 2, 3))
    draw_grey_fractal(surface, 0.0, Pointer(0.0, 0.0), profile)
    pixels = pygame.surfarray.array3d(surface).reshape(-1, 3)
    # Escaped points are blended over the old frame, bounded ones are skipped,
    # so nothing can turn black.
    assert not np.any(np.all(pixels == 0, axis=1))
    assert np.any(np.any(pixels != (1, 2, 3), axis=1))


def test_pulse_scale_range():
    values = [pulse_scale(t / 100) for t in range(500)]
    assert min(values) >= 1.0
    assert max(values) <= 1.2


def test_flow_field_ignores_pointer(profile):
    low, high = pygame.Surface((160, 120)), pygame.Surface((160, 120))
    draw_flow_field(low, 2.0, Pointer(0.5, 0.0), profile)
    draw_flow_field(high, 2.0, Pointer(0.5, 1.0), profile)
    assert (pygame.surfarray.array3d(low) == pygame.surfarray.array3d(high)).all()
