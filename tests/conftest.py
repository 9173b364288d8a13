"""Shared test fixtures."""

import random

import pytest

from wafshift.config import Settings


@pytest.fixture
def rng():
    return random.Random(1337)


@pytest.fixture
def settings(tmp_path):
    s = Settings()
    s.output.directory = tmp_path / "out"
    return s
