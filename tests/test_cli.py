import os

import mido
import pytest

import cantus.__main__


def test_prints_the_line (capsys: pytest.CaptureFixture) -> None:

	assert cantus.__main__.main(["--seed", "7", "--length", "5"]) == 0

	out = capsys.readouterr().out
	lines = out.strip().splitlines()

	assert len(lines) >= 6
	assert lines[0].split()[0] == "1"
	assert "mode=ionian" in lines[-1]
	assert "completed=True" in lines[-1]


def test_output_is_deterministic (capsys: pytest.CaptureFixture) -> None:

	cantus.__main__.main(["--seed", "11", "--mode", "dorian"])
	first = capsys.readouterr().out

	cantus.__main__.main(["--seed", "11", "--mode", "dorian"])

	assert capsys.readouterr().out == first


def test_invalid_mode_exits_with_2 () -> None:

	assert cantus.__main__.main(["--mode", "locrian"]) == 2


def test_midi_file_is_written (tmp_path, capsys: pytest.CaptureFixture) -> None:

	filename = str(tmp_path / "out.mid")

	assert cantus.__main__.main(["--seed", "3", "--length", "4", "--midi", filename, "--bpm", "90"]) == 0
	assert os.path.exists(filename)

	mid = mido.MidiFile(filename)

	assert sum(1 for msg in mid.tracks[0] if msg.type == "note_on") >= 4


class TestConfigFromArgs:

	def _config (self, argv: list):

		return cantus.__main__.config_from_args(cantus.__main__.build_parser().parse_args(argv))

	def test_note_names_for_register (self) -> None:

		config = self._config(["--low", "G3", "--high", "C5"])

		assert (config.register_min, config.register_max) == (55, 72)

	def test_numeric_register (self) -> None:

		config = self._config(["--low", "48", "--high", "67"])

		assert config.register == (48, 67)

	def test_flags_override_profile (self) -> None:

		config = self._config(["--profile", "beginner", "--length", "7"])

		assert config.movement_policy == "stepwise_only"
		assert config.length == 7

	def test_file_beats_profile_and_flags_beat_file (self, tmp_path) -> None:

		path = tmp_path / "round.yaml"
		path.write_text("seed: 42\nmode: aeolian\nlength: 5\n")

		config = self._config(["--config", str(path), "--profile", "advanced", "--seed", "8"])

		assert config.seed == 8
		assert config.mode == "aeolian"
		assert config.length == 5
		assert config.difficulty == "advanced"
