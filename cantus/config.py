"""Generation configuration, difficulty profiles and YAML loading.

:class:`GenerationConfig` is an immutable value validated on construction;
a malformed option raises ``ValueError`` before any search starts.  Degree
masks may be given either as seven booleans (degree 1 first) or as a
collection of degree numbers, so YAML files can say ``allowed_end_degrees:
[1, 3, 5]``.
"""

import dataclasses
import logging
import os
import typing

import yaml

import cantus.candidates
import cantus.intervals


logger = logging.getLogger(__name__)

DIFFICULTIES: typing.Tuple[str, ...] = ("beginner", "intermediate", "advanced")
CONTOURS: typing.Tuple[str, ...] = ("any", "rising", "falling", "arch", "inverted_arch", "random")
MOVEMENT_POLICIES: typing.Tuple[str, ...] = ("stepwise_only", "up_to_max_leap")

DEFAULT_START_DEGREES: typing.FrozenSet[int] = frozenset({1, 3, 5})
DEFAULT_END_DEGREES: typing.FrozenSet[int] = frozenset({1})

MIN_REGISTER_SPAN = 6
MAX_LEAP_STEPS = 8
DEFAULT_MAX_ATTEMPTS = 10000

DegreeMask = typing.Optional[typing.Sequence[typing.Union[bool, int]]]
TraceCallback = typing.Callable[[str, typing.Dict[str, typing.Any]], None]


def degree_set (mask: DegreeMask, name: str = "degree mask") -> typing.FrozenSet[int]:

	"""
	Normalise a degree mask to a set of degrees (1..7).

	Accepts ``None``, a sequence of seven booleans, or a collection of degree
	numbers.  An empty result means the mask is unset.

	Example:
		```python
		degree_set([True, False, True, False, True, False, False])  # → frozenset({1, 3, 5})
		degree_set([1, 3, 5])                                       # → frozenset({1, 3, 5})
		```

	Raises:
		ValueError: If the mask is neither form.
	"""

	if mask is None:
		return frozenset()

	values = list(mask)

	if values and all(isinstance(v, bool) for v in values):

		if len(values) != 7:
			raise ValueError(f"{name} must have 7 boolean entries, got {len(values)}")

		return frozenset(i + 1 for i, allowed in enumerate(values) if allowed)

	for v in values:
		if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= 7:
			raise ValueError(f"{name} must be 7 booleans or degrees 1..7, got {mask!r}")

	return frozenset(values)


@dataclasses.dataclass(frozen=True)
class GenerationConfig:

	"""
	Every option recognised by the melody generator.

	Attributes:
		seed: Fixes the random stream and every relaxation sub-seed.
		length: Target note count (the result may be up to two notes longer).
		note_duration_seconds: Duration of every note.
		mode: One of :data:`cantus.intervals.SUPPORTED_MODES` (or ``major``/``minor``).
		randomize_mode: Pick the mode from ``allowed_modes`` using the seed.
		allowed_modes: Modes available to ``randomize_mode``.
		register_min: Lowest pitch (inclusive).
		register_max: Highest pitch (inclusive).
		difficulty: ``beginner``, ``intermediate`` or ``advanced``.
		contour: ``any``, ``rising``, ``falling``, ``arch``, ``inverted_arch`` or ``random``.
		movement_policy: ``stepwise_only`` or ``up_to_max_leap``.
		max_leap_steps: Largest diatonic move under ``up_to_max_leap`` (1..8).
		immediate_leap_resolution_probability: Chance a leap counts as resolved
			at once; otherwise the next move is forced to step back.
		allowed_start_degrees: Start anchors (default 1, 3, 5).
		allowed_end_degrees: End anchors (default 1).
		allowed_degrees: Degree pool for every note (default unrestricted).
		tendency_engine_enabled: Queue semitone resolutions.
		tendency_resolve_probability: Chance a tendency resolves on the first pass.
		allow_small_detours: Limit detours to moves under a fifth.
		max_attempts: Safety counter on position-advancement attempts.
		trace: Optional ``(event_name, payload)`` callback for trace events.
	"""

	seed: int = 12345
	length: int = 6
	note_duration_seconds: float = 0.8
	mode: str = "ionian"
	randomize_mode: bool = False
	allowed_modes: typing.Tuple[str, ...] = cantus.intervals.SUPPORTED_MODES
	register_min: int = 55
	register_max: int = 72
	difficulty: str = "beginner"
	contour: str = "random"
	movement_policy: str = "up_to_max_leap"
	max_leap_steps: int = MAX_LEAP_STEPS
	immediate_leap_resolution_probability: float = 0.8
	allowed_start_degrees: DegreeMask = None
	allowed_end_degrees: DegreeMask = None
	allowed_degrees: DegreeMask = None
	tendency_engine_enabled: bool = True
	tendency_resolve_probability: float = 0.8
	allow_small_detours: bool = True
	max_attempts: int = DEFAULT_MAX_ATTEMPTS
	trace: typing.Optional[TraceCallback] = dataclasses.field(default=None, compare=False, repr=False)


	def __post_init__ (self) -> None:

		"""Validate every option."""

		if self.length < 1:
			raise ValueError(f"length must be at least 1, got {self.length}")

		if self.note_duration_seconds <= 0:
			raise ValueError(f"note_duration_seconds must be positive, got {self.note_duration_seconds}")

		_check_mode(self.mode, "mode")

		if self.randomize_mode:

			if not self.allowed_modes:
				raise ValueError("allowed_modes cannot be empty when randomize_mode is set")

			for mode in self.allowed_modes:
				_check_mode(mode, "allowed_modes")

		if self.difficulty not in DIFFICULTIES:
			raise ValueError(f"Unknown difficulty '{self.difficulty}'. Available: {list(DIFFICULTIES)}")

		if self.contour not in CONTOURS:
			raise ValueError(f"Unknown contour '{self.contour}'. Available: {list(CONTOURS)}")

		if self.movement_policy not in MOVEMENT_POLICIES:
			raise ValueError(f"Unknown movement policy '{self.movement_policy}'. Available: {list(MOVEMENT_POLICIES)}")

		if not 1 <= self.max_leap_steps <= MAX_LEAP_STEPS:
			raise ValueError(f"max_leap_steps must be between 1 and {MAX_LEAP_STEPS}, got {self.max_leap_steps}")

		for name in ("immediate_leap_resolution_probability", "tendency_resolve_probability"):
			value = getattr(self, name)
			if not 0.0 <= value <= 1.0:
				raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")

		degree_set(self.allowed_start_degrees, "allowed_start_degrees")
		degree_set(self.allowed_end_degrees, "allowed_end_degrees")
		degree_set(self.allowed_degrees, "allowed_degrees")

		if self.max_attempts < 1:
			raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")


	@property
	def register (self) -> typing.Tuple[int, int]:

		"""Register bounds, ordered and widened to at least a six-semitone span."""

		low = min(self.register_min, self.register_max)
		high = max(self.register_min, self.register_max)

		if high - low < MIN_REGISTER_SPAN:
			high = low + MIN_REGISTER_SPAN

		return low, high


	@property
	def degree_pool (self) -> typing.FrozenSet[int]:

		"""Allowed degrees for every note; empty means unrestricted."""

		return degree_set(self.allowed_degrees)


	@property
	def start_degrees (self) -> typing.FrozenSet[int]:

		"""Effective start anchors."""

		return degree_set(self.allowed_start_degrees) or DEFAULT_START_DEGREES


	@property
	def end_degrees (self) -> typing.FrozenSet[int]:

		"""Effective end anchors."""

		return degree_set(self.allowed_end_degrees) or DEFAULT_END_DEGREES


	@property
	def step_sizes (self) -> typing.List[int]:

		"""Diatonic step sizes permitted by the movement policy and tier."""

		return cantus.candidates.allowed_step_sizes(self.movement_policy, self.max_leap_steps, self.difficulty)


	def replace (self, **changes: typing.Any) -> "GenerationConfig":

		"""Return a copy with some options changed (validated again)."""

		return dataclasses.replace(self, **changes)


def _check_mode (mode: str, name: str) -> None:

	"""Reject unknown modes and Locrian."""

	canonical = cantus.intervals.canonical_mode(mode)

	if canonical not in cantus.intervals.SUPPORTED_MODES:
		raise ValueError(f"{name}: mode '{mode}' is not supported. Available: {list(cantus.intervals.SUPPORTED_MODES)}")


# Named presets, applied before explicit options by config_from_dict().
DIFFICULTY_PROFILES: typing.Dict[str, typing.Dict[str, typing.Any]] = {
	"beginner": {
		"length": 4,
		"register_min": 60,
		"register_max": 72,
		"difficulty": "beginner",
		"movement_policy": "stepwise_only",
		"allowed_degrees": [1, 2, 3, 4, 5],
		"allowed_start_degrees": [1, 3, 5],
		"allowed_end_degrees": [1],
		"tendency_resolve_probability": 0.9,
	},
	"intermediate": {
		"length": 6,
		"register_min": 55,
		"register_max": 72,
		"difficulty": "intermediate",
		"movement_policy": "up_to_max_leap",
		"max_leap_steps": 4,
		"allowed_start_degrees": [1, 3, 5],
		"allowed_end_degrees": [1],
		"tendency_resolve_probability": 0.8,
	},
	"advanced": {
		"length": 8,
		"register_min": 53,
		"register_max": 77,
		"difficulty": "advanced",
		"movement_policy": "up_to_max_leap",
		"max_leap_steps": 8,
		"randomize_mode": True,
		"allowed_end_degrees": [1, 3, 5],
		"tendency_resolve_probability": 0.7,
		"immediate_leap_resolution_probability": 0.6,
	},
}


_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(GenerationConfig) if f.name != "trace")


def config_from_dict (data: typing.Mapping[str, typing.Any]) -> GenerationConfig:

	"""
	Build a config from a plain mapping, such as a parsed YAML document.

	A ``profile`` key names an entry of :data:`DIFFICULTY_PROFILES`; its values
	are applied first and explicit keys override them.

	Raises:
		ValueError: For an unknown profile, an unknown key or an invalid value.
	"""

	options = dict(data)
	profile = options.pop("profile", None)
	merged: typing.Dict[str, typing.Any] = {}

	if profile is not None:

		if profile not in DIFFICULTY_PROFILES:
			raise ValueError(f"Unknown profile '{profile}'. Available: {sorted(DIFFICULTY_PROFILES)}")

		merged.update(DIFFICULTY_PROFILES[profile])

	merged.update(options)

	unknown = sorted(set(merged) - _FIELD_NAMES)

	if unknown:
		raise ValueError(f"Unknown configuration keys: {unknown}")

	for key in ("allowed_modes", "allowed_start_degrees", "allowed_end_degrees", "allowed_degrees"):
		if isinstance(merged.get(key), list):
			merged[key] = tuple(merged[key])

	return GenerationConfig(**merged)


def read_config_file (config_path: str) -> typing.Dict[str, typing.Any]:

	"""
	Read the raw option mapping from a YAML file.

	A missing file logs a warning and yields an empty mapping.

	Raises:
		ValueError: If the document is not a mapping.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		data = yaml.safe_load(f)

	if data is None:
		return {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

	return data


def load_config (config_path: str) -> GenerationConfig:

	"""
	Load a configuration from a YAML file.

	Example:
		```yaml
		profile: intermediate
		seed: 42
		mode: dorian
		allowed_end_degrees: [1, 5]
		```
	"""

	return config_from_dict(read_config_file(config_path))
