import random
import typing

import pytest

import cantus.candidates
import cantus.event_emitter
import cantus.scale
import cantus.tendency


Candidate = cantus.candidates.Candidate


def _engine (
	context: cantus.scale.ScaleContext,
	resolve_probability: float = 0.8,
	allow_small_detours: bool = True,
	emitter: typing.Optional[cantus.event_emitter.EventEmitter] = None,
) -> cantus.tendency.TendencyEngine:

	return cantus.tendency.TendencyEngine(
		context,
		resolve_probability = resolve_probability,
		allow_small_detours = allow_small_detours,
		emitter = emitter,
	)


class TestObserve:

	def test_leading_tone_queues_tonic (self, ionian: cantus.scale.ScaleContext) -> None:

		engine = _engine(ionian)
		engine.observe(71, 1)

		assert engine.pending == (cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=2),)
		assert not engine.pending[0].mandatory

	def test_subdominant_queues_mediant (self, ionian: cantus.scale.ScaleContext) -> None:

		engine = _engine(ionian)
		engine.observe(65, 1)

		assert [o.target_degree for o in engine.pending] == [3]

	def test_stable_degree_queues_nothing (self, ionian: cantus.scale.ScaleContext) -> None:

		engine = _engine(ionian)

		for pitch in (60, 62, 64, 67, 69):
			engine.observe(pitch, 1)

		assert engine.pending == ()

	def test_dorian_pairs (self, dorian: cantus.scale.ScaleContext) -> None:

		engine = _engine(dorian)
		engine.observe(63, 1)
		engine.observe(70, 2)

		assert [o.target_degree for o in engine.pending] == [2, 6]


class TestFilter:

	def test_empty_queue_passes_through (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian)
		candidates = [Candidate(72), Candidate(69)]

		assert engine.filter(71, 2, candidates, rng) == candidates

	def test_probabilistic_resolution (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian, resolve_probability=1.0)
		engine.observe(71, 1)

		kept = engine.filter(71, 2, [Candidate(72), Candidate(69), Candidate(74)], rng)

		assert [c.pitch for c in kept] == [72]
		assert engine.pending == ()

	def test_deferral_prunes_large_leaps_and_becomes_mandatory (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		"""71 -> 77 is four diatonic steps, too large for a detour; 71 -> 65 is three."""

		engine = _engine(ionian, resolve_probability=0.0)
		engine.observe(71, 1)

		kept = engine.filter(71, 2, [Candidate(72), Candidate(69), Candidate(77), Candidate(65)], rng)

		assert [c.pitch for c in kept] == [72, 69, 65]
		assert engine.pending == (cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=1),)
		assert engine.pending[0].mandatory

	def test_deferral_without_detour_limit (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian, resolve_probability=0.0, allow_small_detours=False)
		engine.observe(71, 1)

		kept = engine.filter(71, 2, [Candidate(72), Candidate(77)], rng)

		assert [c.pitch for c in kept] == [72, 77]

	def test_mandatory_pass_forces_target_and_dequeues (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian, resolve_probability=0.0)
		engine.restore([cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=1)])

		kept = engine.filter(69, 3, [Candidate(71), Candidate(67), Candidate(72)], rng)

		assert [c.pitch for c in kept] == [72]
		assert engine.pending == ()

	def test_mandatory_pass_can_leave_nothing (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		"""The obligation is spent even when no candidate reaches the target."""

		engine = _engine(ionian)
		engine.restore([cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=1)])

		assert engine.filter(65, 3, [Candidate(67), Candidate(64)], rng) == []
		assert engine.pending == ()

	def test_only_the_oldest_obligation_is_active (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian, resolve_probability=1.0)
		engine.observe(65, 1)
		engine.observe(71, 2)

		kept = engine.filter(71, 3, [Candidate(72), Candidate(69), Candidate(64)], rng)

		assert [c.pitch for c in kept] == [64]
		assert [o.target_degree for o in engine.pending] == [1]

	def test_deferred_obligation_goes_to_the_back (self, ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

		engine = _engine(ionian, resolve_probability=0.0)
		engine.observe(65, 1)
		engine.observe(71, 2)

		engine.filter(71, 3, [Candidate(72)], rng)

		assert [(o.target_degree, o.remaining_steps) for o in engine.pending] == [(1, 2), (3, 1)]


class TestAppendix:

	def test_mandatory_obligation_yields_nearest_target (self, ionian: cantus.scale.ScaleContext) -> None:

		engine = _engine(ionian)
		engine.restore([cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=1)])

		assert engine.resolution_appendix(67, 55, 72) == 72
		assert engine.pending == ()

	def test_probabilistic_obligation_yields_nothing (self, ionian: cantus.scale.ScaleContext) -> None:

		engine = _engine(ionian)
		engine.observe(71, 5)

		assert engine.resolution_appendix(71, 55, 72) is None
		assert len(engine.pending) == 1

	def test_empty_queue_yields_nothing (self, ionian: cantus.scale.ScaleContext) -> None:

		assert _engine(ionian).resolution_appendix(60, 55, 72) is None


def test_snapshot_and_restore (ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

	engine = _engine(ionian, resolve_probability=1.0)
	engine.observe(71, 1)
	saved = engine.snapshot()

	engine.filter(71, 2, [Candidate(72)], rng)
	assert engine.pending == ()

	engine.restore(saved)
	assert engine.pending == saved


def test_drop_active_and_clear (ionian: cantus.scale.ScaleContext) -> None:

	engine = _engine(ionian)
	engine.observe(65, 1)
	engine.observe(71, 2)

	dropped = engine.drop_active()

	assert dropped is not None and dropped.target_degree == 3
	assert [o.target_degree for o in engine.pending] == [1]

	engine.clear()

	assert engine.pending == ()
	assert engine.drop_active() is None


def test_trace_events (ionian: cantus.scale.ScaleContext, rng: random.Random) -> None:

	emitter = cantus.event_emitter.EventEmitter()
	events: typing.List[str] = []

	emitter.on(cantus.event_emitter.ANY_EVENT, lambda name, payload: events.append(name))

	engine = _engine(ionian, resolve_probability=0.0, emitter=emitter)
	engine.observe(71, 1)
	engine.filter(71, 2, [Candidate(69)], rng)
	engine.filter(69, 3, [Candidate(72)], rng)

	assert events == ["tendency_triggered", "tendency_detour", "tendency_resolved"]


@pytest.mark.parametrize("steps, mandatory", [(2, False), (1, True)])
def test_obligation_mandatory_flag (steps: int, mandatory: bool) -> None:

	assert cantus.tendency.TendencyObligation(target_degree=1, remaining_steps=steps).mandatory is mandatory
