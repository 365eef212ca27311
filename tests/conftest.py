import pytest

from mockexam_lifecycle.registry import StageRegistry


@pytest.fixture(scope="session")
def registry():
    """Stage catalog bundled with the package, loaded once per session."""
    r = StageRegistry()
    r.load()
    return r
