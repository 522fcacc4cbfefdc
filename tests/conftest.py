"""Shared pytest fixtures"""
import pytest


@pytest.fixture(autouse=True)
def digitalocean_token(monkeypatch):
    """Every Config needs a token; tests get a dummy one"""
    monkeypatch.setenv("DIGITALOCEAN_TOKEN", "test-token")
    return "test-token"
