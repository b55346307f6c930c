"""Shared test fixtures for bagforge."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from bagforge.core import hasher as hasher_module
from bagforge.core.bag import Bag
from bagforge.models.algorithm import Algorithm


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def source_dir(tmp_dir: Path) -> Path:
    """Directory holding files to be bagged (outside any bag root)."""
    path = tmp_dir / "sources"
    path.mkdir()
    return path


@pytest.fixture
def bag_root(tmp_dir: Path) -> Path:
    """Location for a bag under test. Not created."""
    return tmp_dir / "bag"


@pytest.fixture
def make_source_file(source_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write a source file of given content or size."""

    def _factory(name: str, content: bytes | None = None, size: int | None = None) -> Path:
        if content is None:
            size = 16 if size is None else size
            content = bytes((i * 7 + len(name)) % 256 for i in range(size))
        path = source_dir / name
        path.write_bytes(content)
        return path

    return _factory


@pytest.fixture
def make_bag(
    bag_root: Path, make_source_file: Callable[..., Path]
) -> Callable[..., Bag]:
    """Factory fixture: assemble and finalize a bag from ``{name: size}``."""

    def _factory(
        files: dict[str, int] | None = None,
        algorithm: Algorithm | str = "sha256",
        root: Path | None = None,
    ) -> Bag:
        files = files if files is not None else {"first.bin": 100, "second.bin": 200}
        bag = Bag.new_empty(root or bag_root, algorithm)
        for name, size in files.items():
            bag.add_file(make_source_file(name, size=size))
        bag.finalize()
        return bag

    return _factory


@pytest.fixture
def sha256_bag(make_bag: Callable[..., Bag]) -> Bag:
    """A finalized SHA-256 bag holding two files of 100 and 200 bytes."""
    return make_bag()


@pytest.fixture(autouse=True)
def _isolate_custom_hashers() -> Iterator[None]:
    """Keep custom algorithm registrations from leaking between tests."""
    saved = dict(hasher_module._CUSTOM_FACTORIES)
    yield
    hasher_module._CUSTOM_FACTORIES.clear()
    hasher_module._CUSTOM_FACTORIES.update(saved)
