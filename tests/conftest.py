"""Shared test fixtures and utilities."""

from pathlib import Path

import pytest

from fastcheck.config import CheckConfig


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write files relative to tmp_path."""
    def _write(path: str, content="test content") -> Path:
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            file_path.write_bytes(content)
        else:
            file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def sample_tree(tmp_path, write_file):
    """Create a small tree under tmp_path/data and return its root."""
    write_file("data/a.txt", "A")
    write_file("data/b.tmp", "scratch")
    write_file("data/src/main.py", "print('hello')")
    write_file("data/src/util/helpers.py", "X = 1")
    write_file("data/z.csv", "a,b,c\n1,2,3")
    return tmp_path / "data"


@pytest.fixture
def make_config():
    """Factory fixture building a CheckConfig with a fixed worker count."""
    def _make(**kwargs) -> CheckConfig:
        kwargs.setdefault("cores", 2)
        return CheckConfig(**kwargs)
    return _make


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture writing a config.toml and returning its path."""
    def _write(text: str, name: str = "config.toml") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write
