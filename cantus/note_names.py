"""Note naming for generated pitches.

Pitches are spelled ``<name><octave>`` with C4 = 60.  Whether a black key is
written as a sharp or a flat follows the mode's parent major key (with the
fixed C tonic): C Dorian is a rotation of Bb major, so it spells with flats.
"""

import typing

import cantus.intervals


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

SHARP_NAMES: typing.List[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES: typing.List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Semitones from a modal tonic to the tonic of its parent major key.
PARENT_MAJOR_OFFSET: typing.Dict[str, int] = {
	"ionian": 0,
	"dorian": -2,
	"phrygian": -4,
	"lydian": 7,
	"mixolydian": 5,
	"aeolian": 3,
	"locrian": 1,
}

# Parent major keys written with sharps (G, D, A, E, B, F#); Db is preferred over C#.
SHARP_KEY_PCS: typing.FrozenSet[int] = frozenset({7, 2, 9, 4, 11, 6})


def prefers_sharps (mode: str, tonic_pc: int = 0) -> bool:

	"""Return True if the mode's parent major key is written with sharps."""

	parent = (tonic_pc + PARENT_MAJOR_OFFSET[cantus.intervals.canonical_mode(mode)]) % 12

	return parent in SHARP_KEY_PCS


def octave_of (pitch: int) -> int:

	"""Return the octave number of a MIDI pitch (C4 = 60)."""

	return pitch // 12 - 1


def note_name (pitch: int, mode: str = "ionian") -> str:

	"""
	Spell a MIDI pitch for a mode.

	Example:
		```python
		note_name(63, "dorian")  # → "Eb4"
		note_name(66, "lydian")  # → "F#4"
		note_name(60)            # → "C4"
		```
	"""

	names = SHARP_NAMES if prefers_sharps(mode) else FLAT_NAMES

	return f"{names[pitch % 12]}{octave_of(pitch)}"


def name_to_pitch (name: str) -> int:

	"""
	Parse a note name such as ``"Bb3"`` or ``"F#5"`` into a MIDI pitch.

	Raises:
		ValueError: If the name is not recognised.
	"""

	for length in (2, 1):

		pitch_class = name[:length]
		octave = name[length:]

		if pitch_class in NOTE_NAME_TO_PC and octave.lstrip("-").isdigit():
			return (int(octave) + 1) * 12 + NOTE_NAME_TO_PC[pitch_class]

	raise ValueError(f"Unknown note name: {name!r}. Expected e.g. 'C4', 'F#3', 'Bb5'.")
