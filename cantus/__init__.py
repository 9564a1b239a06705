"""
Cantus - constraint-driven melodic lines for ear training.

Cantus writes short diatonic melodies of the kind used in melodic dictation:
a handful of notes in one mode, inside a singable register, that start and
end on chosen scale degrees and move the way an ear-training course expects at a
given difficulty.  Every line is fully determined by its seed, so a student
and a checker can regenerate the same exercise from a single number.

How a line is made:

- **Diatonic candidates.** From the previous note, moves of one or more
  scale steps (limited by the movement policy and the difficulty tier) are
  proposed inside the register and the allowed-degree pool.
- **Leap handling.** A leap of a fourth or more may force the next move
  to step back the other way.
- **Tendency tones.** Notes a semitone away from their neighbour degree
  (such as the leading tone) queue a resolution that must be honoured
  within two notes, with room for small detours.
- **Weighting.** Step sizes, the chosen contour, pull towards the middle
  of the register and a cap on featured leaps shape a weight for each
  candidate, and one is drawn by roulette selection.
- **Backtracking.** A dead end re-draws earlier choices from their
  remaining options.  If that fails the run reseeds and relaxes its
  constraints, and a safety counter guarantees termination.
- **Cadence.** The penultimate note leans towards ^2 or ^7 and the last
  note always lands on an allowed end degree.

Minimal example:

    ```python
    import cantus

    config = cantus.GenerationConfig(seed=7, length=8, mode="dorian", difficulty="intermediate")

    for note in cantus.generate(config):
        print(note.pitch, note.duration_seconds)
    ```

Package-level exports: ``GenerationConfig``, ``GenerationResult``,
``NoteEvent``, ``generate``, ``generate_result``, ``load_config``,
``save_midi``.
"""

import cantus.config
import cantus.generator
import cantus.midi_export


GenerationConfig = cantus.config.GenerationConfig
GenerationResult = cantus.generator.GenerationResult
NoteEvent = cantus.generator.NoteEvent
generate = cantus.generator.generate
generate_result = cantus.generator.generate_result
load_config = cantus.config.load_config
save_midi = cantus.midi_export.save_midi
