import math

import numpy as np
import pytest

from constants import MIN_GALAXY_RADIUS
from galaxy import GalaxyParameters, PointSet, generate_galaxy, mix_color


# --- GalaxyParameters ---

def test_default_parameters():
    params = GalaxyParameters()
    assert params.count == 1000
    assert params.size == pytest.approx(0.02)
    assert params.radius == pytest.approx(4.0)
    assert params.branches == 3
    assert params.spin == pytest.approx(0.2)
    assert params.randomness == pytest.approx(0.2)
    assert params.inside_color == "#ff0000"
    assert params.outside_color == "#0000ff"
    assert params.rotate == 0.0


def test_from_dict_ignores_unknown_keys_and_coerces():
    params = GalaxyParameters.from_dict({"count": 250.0, "branches": 5, "seed": 7, "radius": 3})
    assert params.count == 250
    assert isinstance(params.count, int)
    assert params.branches == 5
    assert isinstance(params.radius, float)


def test_zero_radius_is_clamped(params):
    params.update("radius", 0)
    assert params.radius == MIN_GALAXY_RADIUS


def test_negative_radius_in_constructor_is_clamped():
    assert GalaxyParameters(radius=-2).radius == MIN_GALAXY_RADIUS


@pytest.mark.parametrize("key, value", [
    ("count", 0),
    ("branches", 0),
    ("size", 0.0),
    ("randomness", -0.1),
    ("inside_color", "#12345"),
    ("outside_color", "blue"),
])
def test_invalid_values_are_rejected(params, key, value):
    with pytest.raises(ValueError):
        params.update(key, value)


def test_unknown_key_is_rejected(params):
    with pytest.raises(KeyError):
        params.update("colour", "#ffffff")


def test_colors_are_normalized(params):
    params.update("inside_color", "FF00AA")
    assert params.inside_color == "#ff00aa"


def test_branches_may_exceed_count():
    params = GalaxyParameters(count=2, branches=5)
    point_set = generate_galaxy(params, np.random.default_rng(0))
    assert point_set.count == 2


# --- generate_galaxy ---

@pytest.mark.parametrize("count", [1, 10, 1000, 4321])
def test_generates_exactly_count_points(count):
    params = GalaxyParameters(count=count)
    point_set = generate_galaxy(params, np.random.default_rng(1))
    assert point_set.positions.shape == (count, 3)
    assert point_set.colors.shape == (count, 3)
    assert point_set.positions.dtype == np.float32
    assert point_set.colors.dtype == np.float32


def test_color_channels_stay_in_unit_range():
    params = GalaxyParameters(count=5000, inside_color="#ffac30", outside_color="#1b3984", radius=20)
    point_set = generate_galaxy(params, np.random.default_rng(2))
    assert point_set.colors.min() >= 0.0
    assert point_set.colors.max() <= 1.0


def test_center_star_gets_inside_color(fixed_random):
    params = GalaxyParameters(count=4, inside_color="#ff8000", outside_color="#0000ff")
    point_set = generate_galaxy(params, fixed_random(0.0))
    expected = np.array([1.0, 128 / 255, 0.0], dtype=np.float32)
    assert np.array_equal(point_set.colors, np.tile(expected, (4, 1)))


def test_edge_star_approaches_outside_color(fixed_random):
    params = GalaxyParameters(count=4, inside_color="#ff0000", outside_color="#0000ff")
    point_set = generate_galaxy(params, fixed_random(0.999999))
    np.testing.assert_allclose(point_set.colors, [[0.0, 0.0, 1.0]] * 4, atol=1e-5)


def test_position_formula_without_jitter(fixed_random):
    params = GalaxyParameters(count=7, radius=4, branches=3, spin=0.2, randomness=1.5)
    # 0.5 puts every star at half the radius and cancels the jitter.
    point_set = generate_galaxy(params, fixed_random(0.5))

    radius_i = 2.0
    for i in range(7):
        angle = (i % 3) / 3 * 2 * math.pi + 0.2 * radius_i
        expected = [math.cos(angle) * radius_i, 0.0, math.sin(angle) * radius_i]
        np.testing.assert_allclose(point_set.positions[i], expected, atol=1e-5)


def test_branch_sectors_cycle_with_index(fixed_random):
    params = GalaxyParameters(count=10, branches=3, spin=0.0, randomness=0.0)
    point_set = generate_galaxy(params, fixed_random(0.5))

    x = point_set.positions[:, 0].astype(np.float64)
    z = point_set.positions[:, 2].astype(np.float64)
    angles = np.mod(np.arctan2(z, x), 2 * math.pi)
    sectors = np.rint(angles / (2 * math.pi / 3)).astype(int) % 3
    assert sectors.tolist() == [0, 1, 2, 0, 1, 2, 0, 1, 2, 0]


def test_jitter_is_bounded_by_randomness():
    params = GalaxyParameters(count=2000, randomness=0.4, spin=0.0)
    point_set = generate_galaxy(params, np.random.default_rng(3))
    assert np.abs(point_set.positions[:, 1]).max() < 0.2 + 1e-6


def test_same_seed_gives_identical_output():
    params = GalaxyParameters(count=500, spin=-1.3, randomness=0.7)
    first = generate_galaxy(params, np.random.default_rng(42))
    second = generate_galaxy(params, np.random.default_rng(42))
    assert np.array_equal(first.positions, second.positions)
    assert np.array_equal(first.colors, second.colors)


def test_radius_block_is_drawn_before_jitter(fixed_random):
    rng = fixed_random(0.25)
    generate_galaxy(GalaxyParameters(count=10), rng)
    assert rng.calls == [10, (10, 3)]


def test_generation_does_not_modify_parameters(params):
    before = params.as_dict()
    generate_galaxy(params, np.random.default_rng(0))
    assert params.as_dict() == before


# --- mix_color ---

def test_mix_color_endpoints():
    inside = np.array([1.0, 0.5, 0.0])
    outside = np.array([0.0, 0.0, 1.0])
    out = np.empty(3, dtype=np.float32)
    mix_color(inside, outside, 0.0, out)
    np.testing.assert_array_equal(out, inside.astype(np.float32))
    mix_color(inside, outside, 1.0, out)
    np.testing.assert_array_equal(out, outside.astype(np.float32))


def test_mix_color_midpoint_writes_row_in_place():
    colors = np.zeros((2, 3), dtype=np.float32)
    mix_color(np.zeros(3), np.ones(3), 0.5, colors[1])
    np.testing.assert_allclose(colors, [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]])


def test_generator_colors_follow_mix_color(fixed_random):
    params = GalaxyParameters(count=3, radius=4, inside_color="#ff8000", outside_color="#2040ff")
    point_set = generate_galaxy(params, fixed_random(0.25))
    expected = np.empty(3, dtype=np.float32)
    mix_color(np.array([1.0, 128 / 255, 0.0]), np.array([32 / 255, 64 / 255, 1.0]), 0.25, expected)
    np.testing.assert_array_equal(point_set.colors, np.tile(expected, (3, 1)))


# --- PointSet ---

def test_release_empties_buffers(params):
    point_set = generate_galaxy(params, np.random.default_rng(0))
    point_set.release()
    assert point_set.released
    assert point_set.count == 0
    assert point_set.colors.shape == (0, 3)
    # Releasing twice is harmless
    point_set.release()


def test_point_set_carries_material(params):
    point_set = generate_galaxy(params, np.random.default_rng(0))
    assert point_set.size == pytest.approx(params.size)
    assert point_set.size_attenuation
    assert point_set.additive_blending
    assert not point_set.depth_write


def test_point_set_rejects_misaligned_arrays():
    with pytest.raises(ValueError):
        PointSet(np.zeros((3, 3), dtype=np.float32), np.zeros((2, 3), dtype=np.float32), 0.02)
