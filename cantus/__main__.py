"""Command line entry point.

Usage::

    python -m cantus
    python -m cantus --profile intermediate --seed 7 --mode dorian
    python -m cantus --config round.yaml --midi round.mid --bpm 90
"""

import argparse
import logging
import sys
import typing

import cantus.config
import cantus.generator
import cantus.midi_export
import cantus.note_names
import cantus.scale


logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	"""Create the argument parser."""

	parser = argparse.ArgumentParser(prog="cantus", description="Generate a seed-deterministic melodic line")
	parser.add_argument("--config", help="YAML configuration file")
	parser.add_argument("--profile", choices=sorted(cantus.config.DIFFICULTY_PROFILES), help="Difficulty profile preset")
	parser.add_argument("--seed", type=int, help="Random seed")
	parser.add_argument("--length", type=int, help="Number of notes")
	parser.add_argument("--mode", help="Mode (ionian, dorian, phrygian, lydian, mixolydian, aeolian)")
	parser.add_argument("--difficulty", choices=cantus.config.DIFFICULTIES, help="Difficulty tier")
	parser.add_argument("--contour", choices=cantus.config.CONTOURS, help="Melodic contour")
	parser.add_argument("--low", help="Lowest pitch, as a MIDI number or note name (e.g. G3)")
	parser.add_argument("--high", help="Highest pitch, as a MIDI number or note name (e.g. C5)")
	parser.add_argument("--midi", help="Write the line to this MIDI file")
	parser.add_argument("--bpm", type=float, default=120, help="Tempo for MIDI export (default: 120)")
	parser.add_argument("--verbose", "-v", action="store_true", help="Log search decisions")

	return parser


def _parse_pitch (value: str) -> int:

	"""Accept a MIDI number or a note name."""

	if value.lstrip("-").isdigit():
		return int(value)

	return cantus.note_names.name_to_pitch(value)


def config_from_args (args: argparse.Namespace) -> cantus.config.GenerationConfig:

	"""Merge the YAML file, the profile and explicit flags into one config (flags win)."""

	options: typing.Dict[str, typing.Any] = {}

	if args.config:
		options.update(cantus.config.read_config_file(args.config))

	if args.profile:
		options["profile"] = args.profile

	overrides = {
		"seed": args.seed,
		"length": args.length,
		"mode": args.mode,
		"difficulty": args.difficulty,
		"contour": args.contour,
		"register_min": _parse_pitch(args.low) if args.low else None,
		"register_max": _parse_pitch(args.high) if args.high else None,
	}

	options.update({k: v for k, v in overrides.items() if v is not None})

	return cantus.config.config_from_dict(options)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""Run the command line tool and return an exit code."""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		config = config_from_args(args)
		result = cantus.generator.generate_result(config)
	except ValueError as exc:
		logger.error(f"Invalid configuration: {exc}")
		return 2

	context_mode = result.mode

	for index, note in enumerate(result.notes):
		name = cantus.note_names.note_name(note.pitch, context_mode)
		degree = cantus.scale.resolve(context_mode).degree_of(note.pitch)
		print(f"{index + 1:>3}  {note.pitch:>3}  {name:<4}  ^{degree}")

	print(
		f"mode={result.mode} contour={result.contour} notes={len(result.notes)} "
		f"backtracks={result.backtracks} relaxations={result.relaxations} completed={result.completed}"
	)

	if args.midi:
		cantus.midi_export.save_midi(result.notes, args.midi, bpm=args.bpm)

	return 0 if result.completed else 1


if __name__ == "__main__":
	sys.exit(main())
