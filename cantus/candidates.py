"""Candidate builder: the legal next pitches from a previous pitch.

Candidates are diatonic moves of each permitted step size, up and down,
kept only when they stay in register, in the scale and in the allowed-degree
pool.  An empty result is the signal for the search to backtrack.
"""

import dataclasses
import typing

import cantus.scale


# Largest step each difficulty tier ever takes (7 diatonic steps = an octave).
TIER_MAX_STEPS: typing.Dict[str, int] = {
	"beginner": 2,
	"intermediate": 4,
	"advanced": 7,
}


@dataclasses.dataclass(frozen=True)
class Candidate:

	"""A possible next pitch and its relative selection weight."""

	pitch: int
	weight: float = 1.0


def allowed_step_sizes (movement_policy: str, max_leap_steps: int, difficulty: str) -> typing.List[int]:

	"""
	Return the diatonic step sizes a move may use.

	``stepwise_only`` allows single steps whatever the tier.  ``up_to_max_leap``
	allows 1..max_leap_steps, capped by the tier's largest step.

	Example:
		```python
		allowed_step_sizes("up_to_max_leap", 8, "intermediate")  # → [1, 2, 3, 4]
		allowed_step_sizes("stepwise_only", 8, "advanced")       # → [1]
		```
	"""

	if movement_policy == "stepwise_only":
		return [1]

	largest = max(1, min(max_leap_steps, TIER_MAX_STEPS[difficulty]))

	return list(range(1, largest + 1))


def register_center (register_min: int, register_max: int) -> int:

	"""Integer centre of the register, used to pick the resolving direction."""

	return (register_min + register_max) // 2


def resolving_step (
	previous_pitch: int,
	register_min: int,
	register_max: int,
	context: cantus.scale.ScaleContext,
) -> int:

	"""Return the single diatonic step from ``previous_pitch`` back toward the register centre."""

	if previous_pitch > register_center(register_min, register_max):
		return context.step_down(previous_pitch)

	return context.step_up(previous_pitch)


def build_candidates (
	previous_pitch: int,
	register_min: int,
	register_max: int,
	must_resolve_next: bool,
	allowed_degrees: typing.Optional[typing.AbstractSet[int]],
	step_sizes: typing.Sequence[int],
	context: cantus.scale.ScaleContext,
) -> typing.List[Candidate]:

	"""
	Enumerate the legal next pitches.

	Parameters:
		previous_pitch: The last placed pitch.
		register_min: Lowest allowed pitch (inclusive).
		register_max: Highest allowed pitch (inclusive).
		must_resolve_next: A leap was left unresolved, so only the single step
			back toward the register centre survives.
		allowed_degrees: Degree pool, or None for unrestricted.
		step_sizes: Diatonic step sizes permitted by movement policy and tier.
		context: Scale model for the active mode.

	Returns:
		Candidates with unit weight, ordered by step size then up before down.
	"""

	candidates: typing.List[Candidate] = []

	for steps in step_sizes:
		for direction in (1, -1):

			pitch = context.move(previous_pitch, steps * direction)

			if pitch < register_min or pitch > register_max:
				continue

			if not context.contains(pitch):
				continue

			if allowed_degrees and context.degree_of(pitch) not in allowed_degrees:
				continue

			candidates.append(Candidate(pitch=pitch))

	if must_resolve_next:
		target = resolving_step(previous_pitch, register_min, register_max, context)
		candidates = [c for c in candidates if c.pitch == target]

	return candidates
