"""Scale model: degree arithmetic for the seven diatonic modes.

:func:`resolve` returns a :class:`ScaleContext` for a mode.  Contexts are built
once at import time and shared, since they are immutable.

All stepping works on **absolute MIDI pitches**.  A diatonic step moves to the
next scale member above or below, whatever its semitone distance, so
``step_up(64)`` in C Ionian is 65 (E to F) while ``step_up(65)`` is 67.
"""

import dataclasses
import typing

import cantus.intervals


@dataclasses.dataclass(frozen=True)
class ScaleContext:

	"""
	Degree tables for one mode with a C tonic.

	Attributes:
		mode: Canonical mode name.
		degree_to_pitch_class: Pitch class of degrees 1..7 (index 0 = degree 1).
		pitch_class_mask: The seven pitch classes in the scale.
		semitone_pairs: ``(upper_degree, lower_degree)`` tendency pairs.
	"""

	mode: str
	degree_to_pitch_class: typing.Tuple[int, ...]
	pitch_class_mask: typing.FrozenSet[int]
	semitone_pairs: typing.Tuple[typing.Tuple[int, int], ...]


	def contains (self, pitch: int) -> bool:

		"""Return True if the pitch belongs to the scale."""

		return pitch % 12 in self.pitch_class_mask


	def degree_of (self, pitch: int) -> typing.Optional[int]:

		"""Return the scale degree (1..7) of a pitch, or None if it is chromatic."""

		pc = pitch % 12

		for index, degree_pc in enumerate(self.degree_to_pitch_class):
			if degree_pc == pc:
				return index + 1

		return None


	def step_up (self, pitch: int) -> int:

		"""Return the next scale member above the pitch."""

		candidate = pitch + 1

		while not self.contains(candidate):
			candidate += 1

		return candidate


	def step_down (self, pitch: int) -> int:

		"""Return the next scale member below the pitch."""

		candidate = pitch - 1

		while not self.contains(candidate):
			candidate -= 1

		return candidate


	def move (self, pitch: int, steps: int) -> int:

		"""Move a pitch by a signed number of diatonic steps."""

		for _ in range(abs(steps)):
			pitch = self.step_up(pitch) if steps > 0 else self.step_down(pitch)

		return pitch


	def diatonic_distance (self, a: int, b: int) -> int:

		"""
		Return the signed number of diatonic steps from ``a`` to ``b``.

		A chromatic starting pitch counts its first move onto the scale as a step.
		"""

		if a == b:
			return 0

		direction = 1 if b > a else -1
		steps = 0
		pitch = a

		while (pitch < b) if direction > 0 else (pitch > b):
			pitch = self.step_up(pitch) if direction > 0 else self.step_down(pitch)
			steps += 1

		return steps * direction


	def pitches_of_degree (self, degree: int, low: int, high: int) -> typing.List[int]:

		"""Return every pitch of a degree within [low, high], ascending."""

		pc = self.degree_to_pitch_class[degree - 1]

		return [p for p in range(low, high + 1) if p % 12 == pc]


	def nearest_of_degrees (
		self,
		degrees: typing.Iterable[int],
		low: int,
		high: int,
		target: int,
	) -> typing.Optional[int]:

		"""
		Return the in-register pitch of any given degree closest to ``target``.

		Ties go to the lower pitch.  Returns None when no such pitch exists.
		"""

		wanted = set(degrees)
		best: typing.Optional[int] = None
		best_distance = 0

		for pitch in range(low, high + 1):

			if self.degree_of(pitch) not in wanted:
				continue

			distance = abs(pitch - target)

			if best is None or distance < best_distance:
				best = pitch
				best_distance = distance

		return best


def _build_context (mode: str) -> ScaleContext:

	"""Derive the degree table, pitch class mask and tendency pairs for a mode."""

	degree_pcs = cantus.intervals.get_mode_pitch_classes(mode)

	return ScaleContext(
		mode = mode,
		degree_to_pitch_class = tuple(degree_pcs),
		pitch_class_mask = frozenset(degree_pcs),
		semitone_pairs = tuple(cantus.intervals.semitone_pairs(degree_pcs)),
	)


SCALE_CONTEXTS: typing.Dict[str, ScaleContext] = {
	mode: _build_context(mode) for mode in cantus.intervals.MODE_DEGREE_PITCH_CLASSES
}


def resolve (mode: str) -> ScaleContext:

	"""
	Return the shared :class:`ScaleContext` for a mode name or alias.

	Raises:
		ValueError: If the mode is not known.
	"""

	return SCALE_CONTEXTS[cantus.intervals.canonical_mode(mode)]
