import numpy as np
import pytest

import tileplane.WFC.planeGenerator as planeGenerator
from tileplane.WFC.patterns import COAST_PATTERN
from tileplane.WFC.planeGenerator import (
    NO_SPAWN,
    GeneratedPlane,
    GenerationExhausted,
    find_spawn_position,
    generate,
    is_sea,
    make_rng,
    plane_has_land_path,
)
from tileplane.WFC.waveFunctionCollapse import ContradictionError
from tileplane.WFC.waveFunctionCollapse import waveFunctionCollapse as solve


def as_plane(rows):
    return np.array([list(row) for row in rows])


def test_sea_column_blocks_the_plane():
    assert not plane_has_land_path(as_plane(["LS", "CS", "SS"]))
    assert plane_has_land_path(as_plane(["LS", "CS", "SC"]))


def test_spawn_is_centre_of_first_land_patch():
    plane = as_plane(["LLLLLL"] * 6)
    assert find_spawn_position(plane) == (2, 2)


def test_spawn_patch_touching_last_row_and_column_is_found():
    rows = ["SSSSSSS", "SSSSSSS"] + ["SSLLLLL"] * 5
    assert find_spawn_position(as_plane(rows)) == (4, 4)


def test_no_spawn_patch_gives_sentinel():
    rows = ["CLLLLL"] + ["LLLLLL"] * 5
    assert find_spawn_position(as_plane(rows)) == (2, 3)
    # every 5x5 window of a 6x6 plane covers this tile
    rows[3] = "LLCLLL"
    assert find_spawn_position(as_plane(rows)) == NO_SPAWN
    assert find_spawn_position(as_plane(["LLL"] * 3)) == NO_SPAWN


def test_spawn_size_is_configurable():
    plane = as_plane(["SSS", "SLL", "SLL"])
    assert find_spawn_position(plane, size=2) == (2, 2)


def test_is_sea():
    plane = as_plane(["LC", "SS"])
    assert is_sea(plane, 1, 0)
    assert not is_sea(plane, 0, 1)


def test_make_rng():
    rng = np.random.default_rng(5)
    assert make_rng(rng) is rng
    assert isinstance(make_rng(None), np.random.Generator)
    assert make_rng(3).random() == np.random.default_rng(3).random()
    with pytest.raises(ValueError):
        make_rng("seed")


@pytest.mark.parametrize("flag", [True, False, np.bool_(True)])
def test_booleans_are_not_seeds(flag):
    with pytest.raises(ValueError):
        make_rng(flag)
    with pytest.raises(ValueError):
        generate(["LLL", "LLL"], width=6, height=6, rng=flag)


def test_all_land_pattern_is_accepted_first_time():
    result = generate(["LLL", "LLL"], width=8, height=7, rng=0)
    assert isinstance(result, GeneratedPlane)
    plane, spawn = result.plane, result.spawn
    assert plane.shape == (7, 8)
    assert (plane == 'L').all()
    assert spawn == (2, 2)
    assert result.attempts == 1


def test_result_unpacks_to_plane_and_spawn():
    result = generate(["LLL", "LLL"], width=6, height=6, rng=0)
    plane, spawn = result
    assert plane is result.plane
    assert spawn == (2, 2)
    assert "attempts=1" in repr(result)


def test_plane_is_read_only():
    plane, _ = generate(["LL", "LL"], width=6, height=6, rng=1)
    with pytest.raises(ValueError):
        plane[0, 0] = 'S'


def test_same_seed_reproduces_plane_and_spawn():
    kwargs = dict(width=10, height=10, require_spawn=False, max_attempts=500)
    first = generate(COAST_PATTERN, rng=7, **kwargs)
    second = generate(COAST_PATTERN, rng=7, **kwargs)
    assert np.array_equal(first.plane, second.plane)
    assert first.spawn == second.spawn
    assert first.attempts == second.attempts


@pytest.mark.parametrize("seed", range(4))
def test_accepted_planes_are_crossable_and_spawn_is_land(seed):
    plane, spawn = generate(COAST_PATTERN, width=14, height=12, rng=seed,
                            require_spawn=False, max_attempts=500)
    assert plane_has_land_path(plane)
    if spawn != NO_SPAWN:
        row, col = spawn
        assert (plane[row - 2:row + 3, col - 2:col + 3] == 'L').all()


def test_all_sea_pattern_exhausts_the_retry_budget():
    with pytest.warns(UserWarning):
        with pytest.raises(GenerationExhausted) as info:
            generate(["SSS", "SSS"], width=6, height=4, rng=0, max_attempts=7)
    assert info.value.attempts == 7
    assert info.value.failures == {"sea column": 7}
    assert "7 attempts" in str(info.value)


def test_single_row_pattern_cannot_fill_several_rows():
    # "LL" never shows what lies above or below land
    with pytest.raises(GenerationExhausted) as info:
        generate(["LL"], width=6, height=6, rng=0, max_attempts=2)
    assert info.value.failures == {"contradiction": 2}


def test_single_row_pattern_fills_a_single_row():
    plane, spawn = generate(["LL"], width=6, height=1, rng=0, require_spawn=False)
    assert plane.tolist() == [['L'] * 6]
    assert spawn == NO_SPAWN


def test_missing_spawn_patch_is_retried_then_exhausted():
    # plenty of land, but never a 5x5 block of it
    with pytest.raises(GenerationExhausted) as info:
        generate(["LC", "CL"], width=8, height=8, rng=0, max_attempts=3)
    assert info.value.failures == {"no spawn": 3}


def test_missing_spawn_patch_is_allowed_when_not_required():
    result = generate(["LC", "CL"], width=8, height=8, rng=0, require_spawn=False)
    assert result.spawn == NO_SPAWN
    assert result.attempts == 1


def test_contradictions_are_retried(monkeypatch):
    calls = []

    def contradict_once(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise ContradictionError(0)
        return solve(*args, **kwargs)

    monkeypatch.setattr(planeGenerator, "waveFunctionCollapse", contradict_once)
    result = generate(["LLL", "LLL"], width=6, height=6, rng=0)
    assert result.attempts == 2
    assert len(calls) == 2


def test_forced_neighbours_are_resolved_before_any_collapse():
    # land only ever has sea below it, sea only land above it
    plane, _ = generate(["L", "S"], width=1, height=2, rng=3, mirror=False, require_spawn=False)
    assert plane.tolist() == [['L'], ['S']]


def test_mirroring_flips_the_example():
    plane, _ = generate(["L", "S"], width=1, height=2, rng=3,
                        mirror_probability=1.0, require_spawn=False)
    assert plane.tolist() == [['S'], ['L']]


def test_mirroring_does_not_touch_the_callers_pattern():
    pattern = [['L', 'L'], ['S', 'S']]
    generate(pattern, width=2, height=2, rng=0, mirror_probability=1.0, require_spawn=False)
    assert pattern == [['L', 'L'], ['S', 'S']]


@pytest.mark.parametrize("kwargs", [
    dict(width=0, height=5),
    dict(width=5, height=-1),
    dict(width=5, height=5, max_attempts=0),
    dict(width=5, height=5, spawn_size=0),
])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        generate(COAST_PATTERN, **kwargs)


def test_unknown_keyword_is_rejected():
    with pytest.raises(TypeError):
        generate(COAST_PATTERN, width=5, height=5, retries=3)
