"""Mode interval tables and semitone-adjacency helpers.

All modes share a fixed tonic of C (pitch class 0), so each table is both the
interval list of the mode and the pitch class of each scale degree, in degree
order (index 0 = degree 1).
"""

import typing


MODE_DEGREE_PITCH_CLASSES: typing.Dict[str, typing.List[int]] = {
	"ionian":     [0, 2, 4, 5, 7, 9, 11],
	"dorian":     [0, 2, 3, 5, 7, 9, 10],
	"phrygian":   [0, 1, 3, 5, 7, 8, 10],
	"lydian":     [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"aeolian":    [0, 2, 3, 5, 7, 8, 10],
	"locrian":    [0, 1, 3, 5, 6, 8, 10],
}


# Locrian has no stable tonic triad to cadence on, so melodies never use it.
SUPPORTED_MODES: typing.Tuple[str, ...] = (
	"ionian",
	"dorian",
	"phrygian",
	"lydian",
	"mixolydian",
	"aeolian",
)


# Mode aliases accepted on input.
MODE_ALIASES: typing.Dict[str, str] = {
	"major": "ionian",
	"minor": "aeolian",
}


def canonical_mode (mode: str) -> str:

	"""
	Return the canonical lower-case name for a mode or alias.

	Raises:
		ValueError: If the mode is not known.
	"""

	name = mode.strip().lower()
	name = MODE_ALIASES.get(name, name)

	if name not in MODE_DEGREE_PITCH_CLASSES:
		raise ValueError(f"Unknown mode '{mode}'. Available: {sorted(MODE_DEGREE_PITCH_CLASSES)}")

	return name


def get_mode_pitch_classes (mode: str) -> typing.List[int]:

	"""
	Return the pitch class of each scale degree (1..7) of a mode.

	Example:
		```python
		get_mode_pitch_classes("dorian")  # → [0, 2, 3, 5, 7, 9, 10]
		```
	"""

	return list(MODE_DEGREE_PITCH_CLASSES[canonical_mode(mode)])


def semitone_pairs (degree_pitch_classes: typing.Sequence[int]) -> typing.List[typing.Tuple[int, int]]:

	"""
	Find adjacent scale degrees a single semitone apart.

	Each pair is ``(upper_degree, lower_degree)``: the degree that carries the
	tendency, followed by the degree it resolves onto. Consecutive degrees are
	checked in order, then the wrap from degree 7 up to degree 1.

	Example:
		```python
		semitone_pairs([0, 2, 4, 5, 7, 9, 11])  # → [(4, 3), (7, 1)]
		```
	"""

	pairs: typing.List[typing.Tuple[int, int]] = []

	for i in range(6):
		if (degree_pitch_classes[i + 1] - degree_pitch_classes[i]) % 12 == 1:
			pairs.append((i + 2, i + 1))

	# Leading tone: degree 7 sits a semitone under the octave of degree 1.
	if (12 - degree_pitch_classes[6]) % 12 == 1:
		pairs.append((7, 1))

	return pairs
