import random
import typing

import pytest

import cantus.scale


@pytest.fixture
def ionian () -> cantus.scale.ScaleContext:

	"""C Ionian scale context."""

	return cantus.scale.resolve("ionian")


@pytest.fixture
def dorian () -> cantus.scale.ScaleContext:

	"""C Dorian scale context."""

	return cantus.scale.resolve("dorian")


@pytest.fixture
def rng () -> random.Random:

	"""A freshly seeded random stream."""

	return random.Random(0)


@pytest.fixture
def trace_log () -> typing.List[typing.Tuple[str, typing.Dict[str, typing.Any]]]:

	"""A list that a ``trace`` callback can append ``(event_name, payload)`` pairs to."""

	return []
