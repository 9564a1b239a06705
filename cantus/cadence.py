"""Cadence enforcement at the end of a line.

The penultimate note leans toward degrees 2 and 7 when the tonic is an
allowed ending, the final note is hard-filtered to the allowed end degrees,
and :func:`enforce_final` is the safety net that corrects the last note after
everything else has run.
"""

import dataclasses
import logging
import typing

import cantus.candidates
import cantus.scale


logger = logging.getLogger(__name__)

APPROACH_DEGREES = (2, 7)
APPROACH_BONUS = 1.25


def approach_bias (
	candidates: typing.Sequence[cantus.candidates.Candidate],
	end_degrees: typing.AbstractSet[int],
	context: cantus.scale.ScaleContext,
) -> typing.List[cantus.candidates.Candidate]:

	"""Boost supertonic and leading-tone candidates when the line may end on the tonic."""

	if 1 not in end_degrees:
		return list(candidates)

	return [
		dataclasses.replace(c, weight=c.weight * APPROACH_BONUS) if context.degree_of(c.pitch) in APPROACH_DEGREES else c
		for c in candidates
	]


def filter_final (
	candidates: typing.Sequence[cantus.candidates.Candidate],
	end_degrees: typing.AbstractSet[int],
	context: cantus.scale.ScaleContext,
) -> typing.List[cantus.candidates.Candidate]:

	"""Keep only candidates that land on an allowed end degree."""

	return [c for c in candidates if context.degree_of(c.pitch) in end_degrees]


def nearest_allowed_end (
	register_min: int,
	register_max: int,
	target: int,
	end_degrees: typing.AbstractSet[int],
	context: cantus.scale.ScaleContext,
) -> typing.Optional[int]:

	"""
	Return the in-register pitch of an allowed end degree nearest to ``target``.

	Falls back to the nearest tonic when no end degree fits the register.
	"""

	pitch = context.nearest_of_degrees(end_degrees, register_min, register_max, target)

	if pitch is None:
		pitch = context.nearest_of_degrees([1], register_min, register_max, target)

	return pitch


def enforce_final (
	pitches: typing.Sequence[int],
	register_min: int,
	register_max: int,
	end_degrees: typing.AbstractSet[int],
	context: cantus.scale.ScaleContext,
) -> typing.Optional[int]:

	"""
	Check the last pitch of a line against the allowed end degrees.

	Returns:
		The replacement pitch when the last pitch is not an allowed ending,
		otherwise None.
	"""

	if not pitches:
		return None

	last = pitches[-1]

	if context.degree_of(last) in end_degrees:
		return None

	replacement = nearest_allowed_end(register_min, register_max, last, end_degrees, context)

	if replacement is not None:
		logger.info(f"Final pitch {last} is not an allowed ending; replaced with {replacement}")

	return replacement
