"""Tests for the mode tables and the ScaleContext degree arithmetic."""

import pytest

import cantus.intervals
import cantus.scale


@pytest.mark.parametrize("mode, expected", [
	("ionian", [(4, 3), (7, 1)]),
	("dorian", [(3, 2), (7, 6)]),
	("phrygian", [(2, 1), (6, 5)]),
	("lydian", [(5, 4), (7, 1)]),
	("mixolydian", [(4, 3), (7, 6)]),
	("aeolian", [(3, 2), (6, 5)]),
	("locrian", [(2, 1), (5, 4)]),
])
def test_semitone_pairs (mode: str, expected: list) -> None:

	"""Each mode has exactly two semitone-adjacent degree pairs."""

	assert list(cantus.scale.resolve(mode).semitone_pairs) == expected


def test_every_mode_has_seven_pitch_classes () -> None:

	for mode in cantus.intervals.MODE_DEGREE_PITCH_CLASSES:
		context = cantus.scale.resolve(mode)

		assert len(context.pitch_class_mask) == 7
		assert context.degree_to_pitch_class[0] == 0


def test_aliases_resolve_to_canonical_modes () -> None:

	assert cantus.scale.resolve("major").mode == "ionian"
	assert cantus.scale.resolve("Minor").mode == "aeolian"


def test_unknown_mode_raises () -> None:

	with pytest.raises(ValueError, match="Unknown mode"):
		cantus.scale.resolve("hypodorian")


def test_contexts_are_shared () -> None:

	"""resolve() returns the one context built at import time."""

	assert cantus.scale.resolve("dorian") is cantus.scale.resolve("dorian")


class TestStepping:

	def test_step_up_skips_chromatic_pitches (self, ionian: cantus.scale.ScaleContext) -> None:

		"""E to F is one diatonic step, F to G is also one."""

		assert ionian.step_up(64) == 65
		assert ionian.step_up(65) == 67

	def test_step_down_wraps_below_tonic (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.step_down(60) == 59

	def test_move_an_octave (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.move(60, 7) == 72
		assert ionian.move(72, -7) == 60
		assert ionian.move(60, 0) == 60

	def test_dorian_third_is_flat (self, dorian: cantus.scale.ScaleContext) -> None:

		assert dorian.move(60, 2) == 63

	def test_diatonic_distance_is_signed (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.diatonic_distance(60, 72) == 7
		assert ionian.diatonic_distance(72, 60) == -7
		assert ionian.diatonic_distance(64, 65) == 1
		assert ionian.diatonic_distance(67, 67) == 0


class TestDegrees:

	def test_degree_of (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.degree_of(60) == 1
		assert ionian.degree_of(71) == 7
		assert ionian.degree_of(55) == 5

	def test_chromatic_pitch_has_no_degree (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.degree_of(61) is None
		assert not ionian.contains(61)

	def test_pitches_of_degree (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.pitches_of_degree(1, 55, 72) == [60, 72]
		assert ionian.pitches_of_degree(5, 55, 72) == [55, 67]

	def test_nearest_of_degrees_prefers_lower_on_tie (self, ionian: cantus.scale.ScaleContext) -> None:

		"""66 is six semitones from both 60 and 72."""

		assert ionian.nearest_of_degrees([1], 55, 72, 66) == 60
		assert ionian.nearest_of_degrees([1], 55, 72, 67) == 72

	def test_nearest_of_degrees_none_when_out_of_register (self, ionian: cantus.scale.ScaleContext) -> None:

		assert ionian.nearest_of_degrees([1], 62, 70, 64) is None
