import os
import sys

import pytest

# Ensure project root is in sys.path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# pygame must not try to open a real window during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

import invaders_core as core


class StubRng:
    """Stand-in for the random module with fixed draws."""

    def __init__(self, roll=1.0, pick=0):
        self.roll = roll
        self.pick = pick

    def random(self):
        return self.roll

    def randrange(self, n):
        return min(self.pick, n - 1)


class Keys(dict):
    """Key state lookup like pygame.key.get_pressed(); unknown keys are up."""

    def __missing__(self, key):
        return False


@pytest.fixture
def world():
    """A fresh 800x600 world."""
    return core.create_world(800, 600)


@pytest.fixture
def tall_world():
    """An 800x1000 world; its grid starts above the pace threshold."""
    return core.create_world(800, 1000)


@pytest.fixture
def quiet_rng():
    """Invaders never fire."""
    return StubRng(roll=1.0)


@pytest.fixture
def fonts():
    pygame.font.init()
    yield pygame.font.Font(None, 28), pygame.font.Font(None, 64), pygame.font.Font(None, 24)
    pygame.font.quit()


@pytest.fixture
def stub_rng():
    """The StubRng class, for tests that need specific draws."""
    return StubRng


@pytest.fixture
def keys():
    """The Keys class, for building pygame-like key states."""
    return Keys
