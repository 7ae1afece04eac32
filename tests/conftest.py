import pytest


@pytest.fixture(autouse=True)
def gnu_argument_order(monkeypatch):
    """Let getopt.gnu_getopt permute arguments regardless of the caller's environment."""
    monkeypatch.delenv("POSIXLY_CORRECT", raising=False)
