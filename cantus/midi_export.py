"""Standard MIDI file export for generated lines."""

import logging
import typing

import mido

import cantus.generator


logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480


def line_to_midi (
	notes: typing.Sequence[cantus.generator.NoteEvent],
	bpm: float = 120,
	velocity: int = 90,
	channel: int = 0,
	program: typing.Optional[int] = None,
) -> mido.MidiFile:

	"""
	Render a line as a one-track MIDI file.

	Note durations are converted from seconds to ticks at the given tempo.
	Notes play back to back with no gaps.

	Parameters:
		notes: The line to render.
		bpm: Tempo written to the file.
		velocity: Note-on velocity (1-127).
		channel: MIDI channel (0-15).
		program: Optional program change sent before the first note.

	Raises:
		ValueError: If the line is empty or an argument is out of range.
	"""

	if not notes:
		raise ValueError("Cannot export an empty line")

	if not 1 <= velocity <= 127:
		raise ValueError(f"Velocity must be between 1 and 127, got {velocity}")

	if not 0 <= channel <= 15:
		raise ValueError(f"Channel must be between 0 and 15, got {channel}")

	tempo = mido.bpm2tempo(bpm)

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = TICKS_PER_BEAT
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage('set_tempo', tempo=tempo, time=0))

	if program is not None:
		track.append(mido.Message('program_change', channel=channel, program=program, time=0))

	for note in notes:

		ticks = max(1, int(round(mido.second2tick(note.duration_seconds, TICKS_PER_BEAT, tempo))))

		track.append(mido.Message('note_on', channel=channel, note=note.pitch, velocity=velocity, time=0))
		track.append(mido.Message('note_off', channel=channel, note=note.pitch, velocity=0, time=ticks))

	track.append(mido.MetaMessage('end_of_track', time=0))

	return mid


def save_midi (
	notes: typing.Sequence[cantus.generator.NoteEvent],
	filename: str,
	bpm: float = 120,
	velocity: int = 90,
	channel: int = 0,
	program: typing.Optional[int] = None,
) -> None:

	"""Write a line to a standard MIDI file."""

	mid = line_to_midi(notes, bpm=bpm, velocity=velocity, channel=channel, program=program)

	logger.info(f"Saving {len(notes)} notes to {filename}...")
	mid.save(filename)
	logger.info(f"Saved {filename}")
