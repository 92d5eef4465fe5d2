import random
import pytest

from src.config import Settings
from src.core.engine import DeliveryEngine


class ScriptedRandom(random.Random):
    """Random source whose random() returns a fixed sequence of draws."""

    def __init__(self, draws, seed=0):
        super().__init__(seed)
        self.draws = list(draws)

    def random(self):
        if not self.draws:
            raise AssertionError("Scripted random source exhausted")
        return self.draws.pop(0)

    def getrandbits(self, k):
        # Keep choice() on the seeded generator instead of the scripted draws
        return super().getrandbits(k)


@pytest.fixture
def scripted_random():
    """Build a random source that replays the given success draws."""
    return ScriptedRandom


@pytest.fixture
def make_settings():
    """Build Settings without reading a .env file."""
    def _make(**overrides):
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def make_engine(make_settings):
    """Build an engine on a fresh virtual clock, started by default."""
    engines = []

    def _make(rng=None, start=True, **overrides):
        engine = DeliveryEngine(make_settings(**overrides), rng=rng or random.Random(1234))
        if start:
            engine.start()
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.stop()
