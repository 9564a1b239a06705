import pytest

import cantus.candidates
import cantus.scale


def _pitches (candidates: list) -> list:

	return [c.pitch for c in candidates]


@pytest.mark.parametrize("policy, max_leap, difficulty, expected", [
	("stepwise_only", 8, "advanced", [1]),
	("up_to_max_leap", 8, "beginner", [1, 2]),
	("up_to_max_leap", 8, "intermediate", [1, 2, 3, 4]),
	("up_to_max_leap", 8, "advanced", [1, 2, 3, 4, 5, 6, 7]),
	("up_to_max_leap", 3, "advanced", [1, 2, 3]),
	("up_to_max_leap", 1, "intermediate", [1]),
])
def test_allowed_step_sizes (policy: str, max_leap: int, difficulty: str, expected: list) -> None:

	"""The tier caps the step size even when max_leap_steps allows more."""

	assert cantus.candidates.allowed_step_sizes(policy, max_leap, difficulty) == expected


def test_register_center () -> None:

	assert cantus.candidates.register_center(55, 72) == 63
	assert cantus.candidates.register_center(60, 66) == 63


def test_steps_ordered_up_then_down (ionian: cantus.scale.ScaleContext) -> None:

	candidates = cantus.candidates.build_candidates(60, 55, 72, False, None, [1, 2], ionian)

	assert _pitches(candidates) == [62, 59, 64, 57]
	assert all(c.weight == 1.0 for c in candidates)


def test_register_bounds_are_inclusive (ionian: cantus.scale.ScaleContext) -> None:

	candidates = cantus.candidates.build_candidates(72, 55, 72, False, None, [1], ionian)

	assert _pitches(candidates) == [71]

	candidates = cantus.candidates.build_candidates(71, 55, 72, False, None, [1], ionian)

	assert _pitches(candidates) == [72, 69]


def test_degree_pool_filters (ionian: cantus.scale.ScaleContext) -> None:

	candidates = cantus.candidates.build_candidates(60, 55, 72, False, {1, 3, 5}, [1, 2], ionian)

	assert _pitches(candidates) == [64]


def test_empty_pool_means_unrestricted (ionian: cantus.scale.ScaleContext) -> None:

	restricted = cantus.candidates.build_candidates(60, 55, 72, False, frozenset(), [1], ionian)

	assert _pitches(restricted) == [62, 59]


def test_all_candidates_are_diatonic (dorian: cantus.scale.ScaleContext) -> None:

	candidates = cantus.candidates.build_candidates(63, 48, 84, False, None, range(1, 8), dorian)

	assert len(candidates) == 14
	assert all(dorian.contains(c.pitch) for c in candidates)


class TestMustResolve:

	def test_below_centre_resolves_up (self, ionian: cantus.scale.ScaleContext) -> None:

		candidates = cantus.candidates.build_candidates(60, 55, 72, True, None, [1, 2, 3], ionian)

		assert _pitches(candidates) == [62]

	def test_above_centre_resolves_down (self, ionian: cantus.scale.ScaleContext) -> None:

		candidates = cantus.candidates.build_candidates(69, 55, 72, True, None, [1, 2, 3], ionian)

		assert _pitches(candidates) == [67]

	def test_resolution_outside_pool_leaves_nothing (self, ionian: cantus.scale.ScaleContext) -> None:

		"""An empty list is how the search learns it has to backtrack."""

		candidates = cantus.candidates.build_candidates(60, 55, 72, True, {1, 3}, [1, 2], ionian)

		assert candidates == []
