import logging

import cantus
import cantus.note_names

logging.basicConfig(level=logging.INFO)

ROUND_SEED = 2025
EXERCISES = 5

# One round of dictation: a few lines of rising difficulty, each reproducible from its seed.
for index in range(EXERCISES):

	profile = ("beginner", "beginner", "intermediate", "intermediate", "advanced")[index]

	config = cantus.config.config_from_dict({
		"profile": profile,
		"seed": ROUND_SEED + index,
		"contour": "random",
	})

	result = cantus.generate_result(config)
	names = " ".join(cantus.note_names.note_name(p, result.mode) for p in result.pitches)

	logging.info(f"Exercise {index + 1} ({profile}, {result.mode}, {result.contour}): {names}")

	cantus.save_midi(result.notes, f"dictation_{index + 1}.mid", bpm=80)
