from __future__ import annotations

import json

import numpy as np
import pytest

from discord_detector.buffer import MAX_DISTANCE, BufferState, SlidingSubsequenceBuffer
from discord_detector.config import ConfigurationError


def fill(buffer: SlidingSubsequenceBuffer, values) -> SlidingSubsequenceBuffer:
    for value in values:
        buffer.add(float(value))
    return buffer


def test_empty_buffer_is_not_ready_and_returns_sentinel() -> None:
    buffer = SlidingSubsequenceBuffer(4, 2, 2)
    assert buffer.capacity == 8
    assert buffer.count == 0
    assert buffer.write_cursor == 0
    assert not buffer.ready_to_compute()
    assert not buffer.ready_to_infer()
    assert buffer.compute_nearest_neighbour_distance() == MAX_DISTANCE


def test_documented_scenario() -> None:
    buffer = fill(SlidingSubsequenceBuffer(4, 2, 2), [1, 1, 1, 1, 5, 5])
    assert buffer.count == 6
    assert buffer.write_cursor == 6
    assert buffer.ready_to_compute()
    assert buffer.ready_to_infer()
    assert buffer.compute_nearest_neighbour_distance() == 32.0


def test_wraparound_overwrites_oldest_and_saturates_count() -> None:
    buffer = fill(SlidingSubsequenceBuffer(3, 2, 1), range(8))
    assert buffer.count == buffer.capacity == 6
    assert buffer.write_cursor == 2
    np.testing.assert_array_equal(buffer.values(), [2, 3, 4, 5, 6, 7])
    np.testing.assert_array_equal(buffer.current_subsequence(), [6, 7])

    buffer.add(8.0)
    assert buffer.count == 6
    assert buffer.write_cursor == 3
    np.testing.assert_array_equal(buffer.values(), [3, 4, 5, 6, 7, 8])


def test_readiness_thresholds_are_monotonic() -> None:
    buffer = SlidingSubsequenceBuffer(5, 2, 3)
    compute_flags = []
    infer_flags = []
    for value in range(20):
        buffer.add(float(value))
        compute_flags.append(buffer.ready_to_compute())
        infer_flags.append(buffer.ready_to_infer())
    # count > 4 first holds on the fifth add, count > 6 on the seventh
    assert compute_flags == [False] * 4 + [True] * 16
    assert infer_flags == [False] * 6 + [True] * 14


def test_constant_series_has_zero_distance() -> None:
    buffer = SlidingSubsequenceBuffer(6, 3, 2)
    fill(buffer, [2.5] * (buffer.capacity + 4))
    assert buffer.compute_nearest_neighbour_distance() == 0.0


def test_novel_subsequence_distance_matches_offset() -> None:
    pattern = [1.0, 4.0, 2.0]
    delta = 0.5
    buffer = SlidingSubsequenceBuffer(5, 3, 2)
    fill(buffer, pattern * 5)
    fill(buffer, [value + delta for value in pattern])
    assert buffer.compute_nearest_neighbour_distance() == pytest.approx(3 * delta**2)


def test_distance_is_never_negative() -> None:
    rng = np.random.default_rng(7)
    buffer = SlidingSubsequenceBuffer(8, 4, 2)
    for value in rng.normal(size=100):
        buffer.add(float(value))
        assert buffer.compute_nearest_neighbour_distance() >= 0.0


def test_written_zero_is_not_treated_as_empty() -> None:
    buffer = fill(SlidingSubsequenceBuffer(4, 2, 2), [0, 0, 0, 0, 3, 3])
    assert len(buffer.values()) == 6
    assert buffer.compute_nearest_neighbour_distance() == 18.0


def test_window_without_candidates_returns_sentinel() -> None:
    buffer = fill(SlidingSubsequenceBuffer(2, 3, 1), range(10))
    assert not buffer.ready_to_compute()
    assert buffer.compute_nearest_neighbour_distance() == MAX_DISTANCE


def test_partially_written_candidate_uses_prefix_sum() -> None:
    state = BufferState(
        window_size_in_subsequences=4,
        subsequence_length=2,
        initialization_periods=2,
        write_cursor=6,
        count=5,
        slots=(4.0, None, 0.0, 0.0, 5.0, 5.0, None, None),
    )
    buffer = SlidingSubsequenceBuffer.from_state(state)
    # the candidate at slot 0 stops at the empty slot 1 and only contributes (5 - 4) ** 2
    assert buffer.compute_nearest_neighbour_distance() == 1.0


@pytest.mark.parametrize(
    "params",
    [(0, 2, 2), (4, 0, 2), (4, -1, 2), (4, 2, 0), (4, 2.5, 2), (True, 2, 2)],
)
def test_invalid_parameters_are_rejected(params) -> None:
    with pytest.raises(ConfigurationError):
        SlidingSubsequenceBuffer(*params)


def test_state_survives_json_round_trip() -> None:
    rng = np.random.default_rng(3)
    original = SlidingSubsequenceBuffer(5, 3, 2)
    fill(original, rng.normal(size=11))

    payload = json.loads(json.dumps(original.to_state().to_dict()))
    restored = SlidingSubsequenceBuffer.from_state(BufferState.from_dict(payload))

    assert restored.to_state() == original.to_state()
    for value in rng.normal(size=10):
        original.add(float(value))
        restored.add(float(value))
        assert restored.compute_nearest_neighbour_distance() == original.compute_nearest_neighbour_distance()
    assert restored.count == original.count
    assert restored.write_cursor == original.write_cursor


def test_state_with_wrong_slot_count_is_rejected() -> None:
    state = SlidingSubsequenceBuffer(4, 2, 2).to_state()
    broken = BufferState(
        window_size_in_subsequences=state.window_size_in_subsequences,
        subsequence_length=state.subsequence_length,
        initialization_periods=state.initialization_periods,
        write_cursor=0,
        count=0,
        slots=state.slots[:-1],
    )
    with pytest.raises(ConfigurationError):
        SlidingSubsequenceBuffer.from_state(broken)


def test_state_dict_missing_field_is_rejected() -> None:
    payload = SlidingSubsequenceBuffer(4, 2, 2).to_state().to_dict()
    del payload["write_cursor"]
    with pytest.raises(ConfigurationError):
        BufferState.from_dict(payload)


@pytest.mark.parametrize(
    "field, value",
    [
        ("write_cursor", -1),
        ("write_cursor", 8),
        ("write_cursor", 6.0),
        ("write_cursor", True),
        ("count", -1),
        ("count", 9),
        ("count", 6.0),
        ("count", 5),
    ],
)
def test_state_with_invalid_cursor_or_count_is_rejected(field, value) -> None:
    payload = fill(SlidingSubsequenceBuffer(4, 2, 2), [1, 1, 1, 1, 5, 5]).to_state().to_dict()
    payload[field] = value
    with pytest.raises(ConfigurationError):
        SlidingSubsequenceBuffer.from_state(BufferState.from_dict(payload))


def test_state_count_must_match_written_slots() -> None:
    state = SlidingSubsequenceBuffer(4, 2, 2).to_state()
    inflated = BufferState(
        window_size_in_subsequences=4,
        subsequence_length=2,
        initialization_periods=2,
        write_cursor=0,
        count=state.window_size_in_subsequences * state.subsequence_length,
        slots=state.slots,
    )
    with pytest.raises(ConfigurationError):
        SlidingSubsequenceBuffer.from_state(inflated)
