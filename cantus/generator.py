"""Seed-deterministic melodic line generation with backtracking.

:func:`generate_result` builds a line note by note.  At each position the
candidate builder proposes diatonic moves, the tendency engine and cadence
enforcer narrow them, the weighting engine scores them and one is drawn by
roulette selection.  Every draw pushes a :class:`ChoiceFrame` recording the
whole candidate pool, so a dead end (no legal candidate) pops frames, removes
the option that led there and re-draws from what is left.

If the stack empties without a way forward the run *relaxes*: it derives a
new seed from the current seed and position, drops any forced resolution and
carries on from where it stands.  Repeated relaxation at one position lifts
the allowed-degree pool.  A safety counter bounds the number of advancement
attempts, so generation always terminates.

After the main loop a tendency obligation left pending may append a
resolution note (and a cadence note after it), and a final check snaps the
last note to an allowed end degree.

Each call owns its own ``random.Random`` and shares nothing, so calls are
safe to run concurrently and the same config always yields the same line.
"""

import dataclasses
import logging
import random
import typing

import cantus.cadence
import cantus.candidates
import cantus.config
import cantus.event_emitter
import cantus.scale
import cantus.tendency
import cantus.weighting


logger = logging.getLogger(__name__)

# Consecutive relaxations at one position before the degree pool is lifted.
POOL_RELAX_THRESHOLD = 8

MODE_PICK_SALT = 1337
START_CENTER_FALLOFF = 0.15

CONTOUR_CHOICES: typing.Tuple[str, ...] = ("any", "rising", "falling", "arch", "inverted_arch")

_MASK_32 = 0xFFFFFFFF


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""A pitched, timed note in the generated line."""

	pitch: int
	duration_seconds: float


@dataclasses.dataclass
class ChoiceFrame:

	"""
	An undo point on the backtracking stack.

	Attributes:
		position: Index of the note this frame chose.
		previous_pitch: Pitch the move was made from.
		remaining_options: Weighted candidates not yet ruled out.
		chosen_index: Index of the current choice in ``remaining_options``.
		leap_state: Leap bookkeeping in force before the choice.
		obligations: Tendency queue after this position's filtering.
	"""

	position: int
	previous_pitch: int
	remaining_options: typing.List[cantus.candidates.Candidate]
	chosen_index: int
	leap_state: cantus.weighting.LeapState
	obligations: typing.Tuple[cantus.tendency.TendencyObligation, ...] = ()

	@property
	def chosen (self) -> cantus.candidates.Candidate:

		"""The currently chosen candidate."""

		return self.remaining_options[self.chosen_index]


@dataclasses.dataclass
class GenerationResult:

	"""
	A generated line and a report on how it was reached.

	Attributes:
		notes: The line, in order.
		completed: False only when the safety counter ran out.
		mode: Mode the line was generated in.
		contour: Contour used (``random`` resolved to a concrete shape).
		seed: Seed in force at the end of the run (changes on relaxation).
		attempts: Position-advancement attempts used.
		backtracks: Dead ends recovered by the backtracking stack.
		relaxations: Dead ends recovered by reseeding.
		degree_pool_relaxed: The allowed-degree pool was lifted.
		appended: Notes appended to settle a pending tendency (0..2).
		cadence_overridden: The final note was corrected by the safety net.
	"""

	notes: typing.List[NoteEvent]
	completed: bool
	mode: str
	contour: str
	seed: int
	attempts: int = 0
	backtracks: int = 0
	relaxations: int = 0
	degree_pool_relaxed: bool = False
	appended: int = 0
	cadence_overridden: bool = False

	@property
	def pitches (self) -> typing.List[int]:

		"""The pitches of the line."""

		return [n.pitch for n in self.notes]


def derive_subseed (seed: int, salt: int) -> int:

	"""
	Mix a seed and a salt into a new 32-bit seed.

	Golden-ratio hash combine on unsigned 32-bit arithmetic, so the result is
	the same on every platform.
	"""

	x = 0x9E3779B9
	x ^= (seed + (x << 6) + (x >> 2)) & _MASK_32
	x ^= (salt + (x << 6) + (x >> 2)) & _MASK_32

	return x & _MASK_32


def pick_mode (config: cantus.config.GenerationConfig) -> str:

	"""Return the mode for a run: the configured one, or one drawn from the seed."""

	if not config.randomize_mode:
		return cantus.scale.resolve(config.mode).mode

	options = config.allowed_modes
	chosen = options[derive_subseed(config.seed, MODE_PICK_SALT) % len(options)]

	return cantus.scale.resolve(chosen).mode


def check_reachable (config: cantus.config.GenerationConfig, context: cantus.scale.ScaleContext) -> None:

	"""
	Reject degree masks that leave nothing to play in the register.

	Raises:
		ValueError: If the degree pool, the start anchors or the end anchors
			have no in-register pitch in this mode, or if the pool shares no
			in-register degree with the start or end anchors.
	"""

	low, high = config.register
	degrees = {context.degree_of(p) for p in range(low, high + 1) if context.contains(p)}
	pool = config.degree_pool

	checks = (
		("allowed_degrees", pool),
		("allowed_start_degrees", config.start_degrees),
		("allowed_end_degrees", config.end_degrees),
	)

	for name, wanted in checks:
		if wanted and not degrees & wanted:
			raise ValueError(
				f"{name} {sorted(wanted)} has no pitch in register [{low}, {high}] for mode '{context.mode}'"
			)

	if not pool:
		return

	for name, anchors in (("allowed_start_degrees", config.start_degrees), ("allowed_end_degrees", config.end_degrees)):
		if not degrees & pool & anchors:
			raise ValueError(
				f"allowed_degrees {sorted(pool)} and {name} {sorted(anchors)} share no pitch "
				f"in register [{low}, {high}] for mode '{context.mode}'"
			)


class LineSearch:

	"""Backtracking search state for one generation run."""

	def __init__ (
		self,
		config: cantus.config.GenerationConfig,
		context: cantus.scale.ScaleContext,
		emitter: typing.Optional[cantus.event_emitter.EventEmitter] = None,
	) -> None:

		"""
		Prepare a search.

		Parameters:
			config: Validated configuration.
			context: Scale model for the run's mode.
			emitter: Optional trace emitter.
		"""

		self.config = config
		self.context = context
		self.emitter = emitter

		self.register_min, self.register_max = config.register
		self.length = config.length
		self.duration = config.note_duration_seconds
		self.step_sizes = config.step_sizes
		self.start_degrees = config.start_degrees
		self.end_degrees = config.end_degrees
		self.degree_pool = config.degree_pool

		self.seed = config.seed
		self.rng = random.Random(self.seed)
		self.contour = config.contour

		self.notes: typing.List[NoteEvent] = []
		self.stack: typing.List[ChoiceFrame] = []
		self.position = 0
		self.leap_state = cantus.weighting.LeapState()

		self.tendency: typing.Optional[cantus.tendency.TendencyEngine] = None

		if config.tendency_engine_enabled:
			self.tendency = cantus.tendency.TendencyEngine(
				context,
				resolve_probability = config.tendency_resolve_probability,
				allow_small_detours = config.allow_small_detours,
				emitter = emitter,
			)

		self.attempts = 0
		self.backtracks = 0
		self.relaxations = 0
		self.degree_pool_relaxed = False

		self._stall_position = -1
		self._stalled = 0


	def run (self) -> GenerationResult:

		"""Generate the line and return it with the run report."""

		if self.contour == "random":
			self.contour = self.rng.choice(CONTOUR_CHOICES)
			self._emit("contour_chosen", contour=self.contour)

		self.notes = [NoteEvent(self._choose_start(), self.duration)]
		self.position = 1

		while self.position < self.length and self.attempts < self.config.max_attempts:
			self.attempts += 1
			self._advance()

		completed = self.position >= self.length

		if not completed:
			logger.warning(
				f"Safety counter exhausted after {self.attempts} attempts; "
				f"returning {len(self.notes)} of {self.length} notes"
			)
			self._emit("safety_exhausted", attempts=self.attempts, notes=len(self.notes))

		appended = self._append_resolution()
		overridden = self._enforce_cadence()

		return GenerationResult(
			notes = list(self.notes),
			completed = completed,
			mode = self.context.mode,
			contour = self.contour,
			seed = self.seed,
			attempts = self.attempts,
			backtracks = self.backtracks,
			relaxations = self.relaxations,
			degree_pool_relaxed = self.degree_pool_relaxed,
			appended = appended,
			cadence_overridden = overridden,
		)


	def _choose_start (self) -> int:

		"""Draw the first pitch from the start anchors inside the degree pool, favouring the register centre."""

		degrees = self.start_degrees

		if self.degree_pool:
			degrees = degrees & self.degree_pool

		# A one-note line has to satisfy both anchors with the same note.
		if self.length == 1 and degrees & self.end_degrees:
			degrees = degrees & self.end_degrees

		pitches = [
			p for p in range(self.register_min, self.register_max + 1)
			if self.context.degree_of(p) in degrees
		]

		# One-note lines may narrow to an out-of-register overlap; the pooled anchors are known reachable.
		if not pitches:
			pitches = [
				p for p in range(self.register_min, self.register_max + 1)
				if self.context.degree_of(p) in self.start_degrees
				and (not self.degree_pool or self.context.degree_of(p) in self.degree_pool)
			]

		center = cantus.candidates.register_center(self.register_min, self.register_max)

		weighted = [
			cantus.candidates.Candidate(pitch=p, weight=1.0 / (1.0 + abs(p - center) * START_CENTER_FALLOFF))
			for p in pitches
		]

		return weighted[cantus.weighting.choose_index(weighted, self.rng)].pitch


	def _advance (self) -> None:

		"""Try to place one note at the current position."""

		position = self.position
		previous = self.notes[position - 1].pitch

		candidates = cantus.candidates.build_candidates(
			previous,
			self.register_min,
			self.register_max,
			self.leap_state.must_resolve_next,
			self.degree_pool,
			self.step_sizes,
			self.context,
		)

		if self.tendency is not None and candidates:
			candidates = self.tendency.filter(previous, position, candidates, self.rng)

		if position == self.length - 1:
			candidates = cantus.cadence.filter_final(candidates, self.end_degrees, self.context)

		candidates = cantus.weighting.weight_candidates(
			candidates,
			previous,
			position,
			self.length,
			self.register_min,
			self.register_max,
			self.leap_state,
			self.contour,
			self.config.difficulty,
			self.context,
		)

		if position == self.length - 2:
			candidates = cantus.cadence.approach_bias(candidates, self.end_degrees, self.context)

		if not candidates:
			if not self._backtrack():
				self._relax()
			return

		frame = ChoiceFrame(
			position = position,
			previous_pitch = previous,
			remaining_options = candidates,
			chosen_index = cantus.weighting.choose_index(candidates, self.rng),
			leap_state = self.leap_state,
			obligations = self.tendency.snapshot() if self.tendency is not None else (),
		)

		self.stack.append(frame)
		self._place(frame)


	def _place (self, frame: ChoiceFrame) -> None:

		"""Write a frame's current choice into the line and update the bookkeeping."""

		pitch = frame.chosen.pitch

		del self.notes[frame.position:]
		self.notes.append(NoteEvent(pitch, self.duration))

		move = self.context.diatonic_distance(frame.previous_pitch, pitch)
		steps = abs(move)
		featured = frame.leap_state.featured_leaps_used
		must_resolve = False

		if steps >= cantus.weighting.LEAP_STEPS:
			resolve_now = self.rng.random() < self.config.immediate_leap_resolution_probability
			must_resolve = not resolve_now
			featured += 1

		self.leap_state = cantus.weighting.LeapState(
			must_resolve_next = must_resolve,
			last_steps = steps,
			last_direction = (move > 0) - (move < 0),
			featured_leaps_used = featured,
		)

		if self.tendency is not None:
			self.tendency.restore(frame.obligations)
			self.tendency.observe(pitch, frame.position)

		self.position = frame.position + 1


	def _backtrack (self) -> bool:

		"""
		Recover from a dead end by re-drawing an earlier choice.

		Returns:
			True if a frame still had options, False if the stack is exhausted.
			On exhaustion the line is rewound to the oldest frame's position.
		"""

		exhausted: typing.Optional[ChoiceFrame] = None

		while self.stack:

			frame = self.stack.pop()
			del frame.remaining_options[frame.chosen_index]

			if not frame.remaining_options:
				exhausted = frame
				continue

			frame.chosen_index = cantus.weighting.choose_index(frame.remaining_options, self.rng)
			self.stack.append(frame)

			self.backtracks += 1
			logger.debug(f"Backtracked to position {frame.position}, trying {frame.chosen.pitch}")
			self._emit("backtrack", position=frame.position, pitch=frame.chosen.pitch)

			self._place(frame)
			return True

		if exhausted is not None:
			del self.notes[exhausted.position:]
			self.position = exhausted.position
			self.leap_state = exhausted.leap_state

			if self.tendency is not None:
				self.tendency.restore(exhausted.obligations)

		return False


	def _relax (self) -> None:

		"""Reseed from the current seed and position and drop any forced resolution."""

		position = self.position

		self.relaxations += 1
		self.seed = derive_subseed(self.seed, position)
		self.rng = random.Random(self.seed)
		self.leap_state = dataclasses.replace(self.leap_state, must_resolve_next=False)

		if self.tendency is not None:
			self.tendency.drop_active()

		logger.info(f"Relaxed at position {position}: reseeded to {self.seed}")
		self._emit("relax", position=position, seed=self.seed)

		if position == self._stall_position:
			self._stalled += 1
		else:
			self._stall_position = position
			self._stalled = 1

		if self._stalled >= POOL_RELAX_THRESHOLD and self.degree_pool:
			self.degree_pool = frozenset()
			self.degree_pool_relaxed = True
			logger.info(f"Lifted the allowed-degree pool after {self._stalled} relaxations at position {position}")
			self._emit("degree_pool_relaxed", position=position)


	def _append_resolution (self) -> int:

		"""Settle a tendency left mandatory at the end of the line; return the notes appended."""

		if self.tendency is None or not self.notes:
			return 0

		resolution = self.tendency.resolution_appendix(self.notes[-1].pitch, self.register_min, self.register_max)

		if resolution is None:
			return 0

		self.notes.append(NoteEvent(resolution, self.duration))
		appended = 1

		if self.context.degree_of(resolution) not in self.end_degrees:

			cadence = cantus.cadence.nearest_allowed_end(
				self.register_min, self.register_max, resolution, self.end_degrees, self.context
			)

			if cadence is not None and cadence != resolution:
				self.notes.append(NoteEvent(cadence, self.duration))
				appended = 2

		logger.debug(f"Appended {appended} note(s) to settle a pending tendency")
		self._emit("tendency_appendix", pitches=[n.pitch for n in self.notes[-appended:]])

		return appended


	def _enforce_cadence (self) -> bool:

		"""Snap the last note to an allowed end degree if it is not one already."""

		replacement = cantus.cadence.enforce_final(
			[n.pitch for n in self.notes],
			self.register_min,
			self.register_max,
			self.end_degrees,
			self.context,
		)

		if replacement is None:
			return False

		original = self.notes[-1].pitch
		self.notes[-1] = NoteEvent(replacement, self.duration)
		self._emit("cadence_override", original=original, pitch=replacement)

		return True


	def _emit (self, event_name: str, **payload: typing.Any) -> None:

		if self.emitter is not None:
			self.emitter.emit_sync(event_name, **payload)


def generate_result (config: cantus.config.GenerationConfig) -> GenerationResult:

	"""
	Generate a melodic line and report how it was reached.

	Raises:
		ValueError: If the degree masks leave nothing to play in the register.

	Example:
		```python
		result = generate_result(GenerationConfig(seed=7, length=8, mode="dorian"))
		result.completed     # → True
		len(result.notes)    # → 8 (or up to 10 with a tendency appendix)
		```
	"""

	emitter = cantus.event_emitter.EventEmitter()

	if config.trace is not None:
		emitter.on(cantus.event_emitter.ANY_EVENT, config.trace)

	mode = pick_mode(config)

	if config.randomize_mode:
		logger.debug(f"Randomized mode for seed {config.seed}: {mode}")
		emitter.emit_sync("mode_randomized", mode=mode)

	context = cantus.scale.resolve(mode)
	check_reachable(config, context)

	return LineSearch(config, context, emitter).run()


def generate (config: cantus.config.GenerationConfig) -> typing.List[NoteEvent]:

	"""Generate a melodic line: an ordered list of :class:`NoteEvent`."""

	return generate_result(config).notes
