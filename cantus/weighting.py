"""Weighting engine: relative probabilities for candidate pitches.

Each candidate's weight is the product of five factors:

- **Base weight** by diatonic step size, from the difficulty tier's table.
- **Contour** - a nudge toward the direction the desired contour curve
  wants at this point in the line, scaled by tier.
- **Range elasticity** - moves back toward the register centre are favoured
  over moves away from it.
- **Post-leap resolution** - a single step back after a leap is rewarded.
- **Featured-leap soft cap** - leaps beyond the first one (Intermediate) or
  two (Advanced) lose weight so large jumps stay special.

Weights are floored at zero.  If every weight ends at zero the set falls back
to uniform weights.
"""

import dataclasses
import random
import typing

import cantus.candidates
import cantus.scale


LEAP_STEPS = 3

BASE_WEIGHTS: typing.Dict[str, typing.Dict[int, float]] = {
	"beginner": {1: 1.0, 2: 0.35},
	"intermediate": {1: 1.0, 2: 0.5, 3: 0.2, 4: 0.2},
	"advanced": {1: 1.0, 2: 0.55, 3: 0.25, 4: 0.25, 5: 0.08, 6: 0.08, 7: 0.03},
}

CONTOUR_STRENGTH: typing.Dict[str, float] = {
	"beginner": 0.25,
	"intermediate": 0.45,
	"advanced": 0.6,
}

CONTOUR_GAIN = 0.6
TOWARD_CENTER_FACTOR = 1.2
AWAY_FROM_CENTER_FACTOR = 0.9
LEAP_RESOLUTION_BONUS = 1.2

# (leaps allowed before the cap, factor within the allowance, factor beyond it)
FEATURED_LEAP_CAP: typing.Dict[str, typing.Tuple[int, float, float]] = {
	"intermediate": (1, 1.1, 0.7),
	"advanced": (2, 1.05, 0.75),
}


@dataclasses.dataclass(frozen=True)
class LeapState:

	"""
	Leap bookkeeping carried from one position to the next.

	Attributes:
		must_resolve_next: The previous leap was not resolved immediately, so
			the next move is forced to step back toward the register centre.
		last_steps: Diatonic size of the previous move.
		last_direction: Direction of the previous move (-1, 0 or 1).
		featured_leaps_used: Leaps placed so far.
	"""

	must_resolve_next: bool = False
	last_steps: int = 0
	last_direction: int = 0
	featured_leaps_used: int = 0


def base_weight (steps: int, difficulty: str) -> float:

	"""Return the tier's base weight for a move of ``steps`` diatonic steps (0.0 if not allowed)."""

	return BASE_WEIGHTS[difficulty].get(steps, 0.0)


def _lerp (a: float, b: float, t: float) -> float:

	return a + (b - a) * t


def direction_bias (position: int, length: int, contour: str, difficulty: str) -> float:

	"""
	Return the preferred direction at a position, from -1.0 (down) to +1.0 (up), scaled by tier.

	``t`` runs from 0.0 at the first note to 1.0 at the last.  Rising and
	falling ramp toward their direction; the arch rises to the middle then
	falls, the inverted arch does the reverse.  ``any`` (and an unresolved
	``random``) has no preference.
	"""

	t = 0.0 if length <= 1 else position / float(length - 1)

	if contour == "rising":
		bias = _lerp(0.0, 1.0, t)

	elif contour == "falling":
		bias = _lerp(0.0, -1.0, t)

	elif contour == "arch":
		bias = _lerp(0.0, 1.0, t / 0.5) if t <= 0.5 else _lerp(1.0, -1.0, (t - 0.5) / 0.5)

	elif contour == "inverted_arch":
		bias = _lerp(0.0, -1.0, t / 0.5) if t <= 0.5 else _lerp(-1.0, 1.0, (t - 0.5) / 0.5)

	else:
		bias = 0.0

	return bias * CONTOUR_STRENGTH[difficulty]


def range_elasticity (previous_pitch: int, candidate: int, register_min: int, register_max: int) -> float:

	"""Favour moves back toward the register centre when the previous pitch is off-centre."""

	center = (register_min + register_max) * 0.5
	offset = previous_pitch - center
	direction = _sign(candidate - previous_pitch)

	if (offset > 0 and direction < 0) or (offset < 0 and direction > 0):
		return TOWARD_CENTER_FACTOR

	return AWAY_FROM_CENTER_FACTOR


def featured_leap_factor (steps: int, featured_leaps_used: int, difficulty: str) -> float:

	"""Soft cap on the number of leaps per line."""

	if steps < LEAP_STEPS or difficulty not in FEATURED_LEAP_CAP:
		return 1.0

	allowance, within, beyond = FEATURED_LEAP_CAP[difficulty]

	return within if featured_leaps_used < allowance else beyond


def weight_candidates (
	candidates: typing.Sequence[cantus.candidates.Candidate],
	previous_pitch: int,
	position: int,
	length: int,
	register_min: int,
	register_max: int,
	leap_state: LeapState,
	contour: str,
	difficulty: str,
	context: cantus.scale.ScaleContext,
) -> typing.List[cantus.candidates.Candidate]:

	"""
	Return the candidates with weights assigned.

	Example:
		```python
		weighted = weight_candidates(candidates, 60, 1, 6, 55, 72, LeapState(), "any", "beginner", context)
		```
	"""

	if not candidates:
		return []

	bias = direction_bias(position, length, contour, difficulty)
	weighted: typing.List[cantus.candidates.Candidate] = []

	for candidate in candidates:

		move = context.diatonic_distance(previous_pitch, candidate.pitch)
		steps = abs(move)
		direction = _sign(move)

		contour_factor = 1.0 + CONTOUR_GAIN * bias * direction
		range_factor = range_elasticity(previous_pitch, candidate.pitch, register_min, register_max)

		resolution_factor = 1.0
		if leap_state.last_steps >= LEAP_STEPS and steps == 1 and direction == -leap_state.last_direction:
			resolution_factor = LEAP_RESOLUTION_BONUS

		leap_factor = featured_leap_factor(steps, leap_state.featured_leaps_used, difficulty)

		weight = base_weight(steps, difficulty) * contour_factor * range_factor * resolution_factor * leap_factor

		weighted.append(dataclasses.replace(candidate, weight=max(0.0, weight)))

	if sum(c.weight for c in weighted) <= 0.0:
		weighted = [dataclasses.replace(c, weight=1.0) for c in weighted]

	return weighted


def choose_index (candidates: typing.Sequence[cantus.candidates.Candidate], rng: random.Random) -> int:

	"""
	Pick a candidate index by cumulative-sum roulette over the weights.

	Falls back to a uniform pick when the weights sum to zero.

	Raises:
		ValueError: If there are no candidates.
	"""

	if not candidates:
		raise ValueError("Candidates cannot be empty")

	total_weight = sum(c.weight for c in candidates)

	if total_weight <= 0.0:
		return rng.randrange(len(candidates))

	roll = rng.uniform(0, total_weight)
	accum = 0.0

	for index, candidate in enumerate(candidates):
		accum += candidate.weight
		if roll <= accum:
			return index

	return len(candidates) - 1


def _sign (value: float) -> int:

	return (value > 0) - (value < 0)
