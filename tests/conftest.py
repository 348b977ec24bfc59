import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest  # noqa: E402

from tests.helpers import synthetic_topology  # noqa: E402


@pytest.fixture
def topology():
    return synthetic_topology()


@pytest.fixture
def bundle(topology):
    from world_pulse.topology import build_geometry

    return build_geometry(topology, topology)


@pytest.fixture
def state(bundle):
    from world_pulse.state import WorldState

    s = WorldState(geometry=bundle)
    s.resize(800, 400, 1.0)
    return s
