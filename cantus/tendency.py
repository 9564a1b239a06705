"""Tendency resolution engine for semitone-adjacent scale degrees.

When the line lands on a degree that sits a semitone from its neighbour (the
leading tone in Ionian, degree 2 in Phrygian, and so on) an obligation is
queued for that neighbour.  The next filtering pass either resolves it at
once (with ``resolve_probability``) or lets the line take a small detour and
makes the resolution mandatory on the pass after that.

Only the oldest obligation is ever active.  The queue can be snapshotted and
restored so the backtracking search can rewind it together with the notes.
"""

import collections
import dataclasses
import logging
import random
import typing

import cantus.candidates
import cantus.event_emitter
import cantus.scale


logger = logging.getLogger(__name__)

# Detours may not move this many diatonic steps or more (a fifth and beyond).
DETOUR_MAX_STEPS = 4

PROBABILISTIC = 2
MANDATORY = 1


@dataclasses.dataclass(frozen=True)
class TendencyObligation:

	"""
	A pending resolution onto ``target_degree``.

	``remaining_steps`` starts at 2 (probabilistic) and drops to 1 (mandatory).
	"""

	target_degree: int
	remaining_steps: int = PROBABILISTIC

	@property
	def mandatory (self) -> bool:

		"""True once the obligation must resolve on the next pass."""

		return self.remaining_steps <= MANDATORY


class TendencyEngine:

	"""FIFO queue of tendency obligations for one generation run."""

	def __init__ (
		self,
		context: cantus.scale.ScaleContext,
		resolve_probability: float = 0.8,
		allow_small_detours: bool = True,
		emitter: typing.Optional[cantus.event_emitter.EventEmitter] = None,
	) -> None:

		"""
		Create an empty engine for a scale context.

		Parameters:
			context: Scale model supplying the semitone pairs.
			resolve_probability: Chance the first pass resolves immediately.
			allow_small_detours: Prune large leaps while a resolution is deferred.
			emitter: Optional trace emitter.
		"""

		self.context = context
		self.resolve_probability = resolve_probability
		self.allow_small_detours = allow_small_detours
		self.emitter = emitter

		self._queue: typing.Deque[TendencyObligation] = collections.deque()


	@property
	def pending (self) -> typing.Tuple[TendencyObligation, ...]:

		"""Queued obligations, oldest first."""

		return tuple(self._queue)


	def snapshot (self) -> typing.Tuple[TendencyObligation, ...]:

		"""Return the queue state for a later :meth:`restore`."""

		return tuple(self._queue)


	def restore (self, state: typing.Iterable[TendencyObligation]) -> None:

		"""Replace the queue with a previously captured state."""

		self._queue = collections.deque(state)


	def clear (self) -> None:

		"""Drop every obligation."""

		self._queue.clear()


	def drop_active (self) -> typing.Optional[TendencyObligation]:

		"""Discard the oldest obligation, returning it (or None if the queue is empty)."""

		if not self._queue:
			return None

		return self._queue.popleft()


	def observe (self, pitch: int, position: int) -> None:

		"""Queue an obligation if the just-placed pitch is the upper side of a semitone pair."""

		degree = self.context.degree_of(pitch)

		for upper, lower in self.context.semitone_pairs:

			if upper != degree:
				continue

			self._queue.append(TendencyObligation(target_degree=lower))

			logger.debug(f"Tendency triggered {upper}->{lower} at position {position}")
			self._emit("tendency_triggered", position=position, degree=upper, target_degree=lower)


	def filter (
		self,
		previous_pitch: int,
		position: int,
		candidates: typing.List[cantus.candidates.Candidate],
		rng: random.Random,
	) -> typing.List[cantus.candidates.Candidate]:

		"""
		Apply the active obligation to a candidate list.

		A mandatory obligation keeps only target-degree candidates and is
		dequeued whatever the outcome.  A probabilistic one does the same with
		``resolve_probability``; otherwise large leaps are pruned (when detours
		are allowed) and the obligation becomes mandatory.

		The random draw is taken on every probabilistic pass so the stream stays
		aligned regardless of the outcome.
		"""

		if not self._queue:
			return candidates

		obligation = self._queue[0]
		target = obligation.target_degree

		if obligation.mandatory:
			self._queue.popleft()
			logger.debug(f"Mandatory resolution to degree {target} at position {position}")
			self._emit("tendency_resolved", position=position, target_degree=target, mandatory=True)
			return self._to_target(candidates, target)

		if rng.random() < self.resolve_probability:
			self._queue.popleft()
			logger.debug(f"Probabilistic resolution to degree {target} at position {position}")
			self._emit("tendency_resolved", position=position, target_degree=target, mandatory=False)
			return self._to_target(candidates, target)

		if self.allow_small_detours:
			candidates = [
				c for c in candidates
				if abs(self.context.diatonic_distance(previous_pitch, c.pitch)) < DETOUR_MAX_STEPS
			]

		# The deferred obligation goes to the back of the queue, now mandatory.
		self._queue.popleft()
		self._queue.append(dataclasses.replace(obligation, remaining_steps=MANDATORY))

		logger.debug(f"Tendency to degree {target} deferred at position {position}")
		self._emit("tendency_detour", position=position, target_degree=target)

		return candidates


	def resolution_appendix (
		self,
		last_pitch: int,
		register_min: int,
		register_max: int,
	) -> typing.Optional[int]:

		"""
		Return the pitch that settles an obligation left mandatory at the end of the line.

		Only the oldest obligation counts, and only once it is mandatory.  The
		queue is cleared when a resolution pitch is returned.
		"""

		if not self._queue or not self._queue[0].mandatory:
			return None

		target = self._queue[0].target_degree
		self._queue.clear()

		return self.context.nearest_of_degrees([target], register_min, register_max, last_pitch)


	def _to_target (
		self,
		candidates: typing.List[cantus.candidates.Candidate],
		target_degree: int,
	) -> typing.List[cantus.candidates.Candidate]:

		"""Keep only candidates on the target degree."""

		return [c for c in candidates if self.context.degree_of(c.pitch) == target_degree]


	def _emit (self, event_name: str, **payload: typing.Any) -> None:

		if self.emitter is not None:
			self.emitter.emit_sync(event_name, **payload)
