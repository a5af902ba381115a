"""Shared test fixtures for mdcombine."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdcombine.compiler import CombinationEngine, DirectiveValidator
from mdcombine.models import Document
from mdcombine.parser import DocumentCollector

WINDOWS_TEMPLATE = " * windows feature\n<insert common-features.md>\n"
UBUNTU_TEMPLATE = " * linux feature\n<insert common-features.md>\n"
COMMON_FEATURES = " * common feature\n"

SAMPLE_TREE = {
    "windows-features.mdext": WINDOWS_TEMPLATE,
    "linux/ubuntu-features.mdext": UBUNTU_TEMPLATE,
    "common-features.md": COMMON_FEATURES,
    "shared/footer.mdsrc": "---\nGenerated docs\n",
    "README.md": "# Readme\n",
    "notes.txt": "not collected\n",
}


def doc(name: str, content: str = "") -> Document:
    """Document whose path equals its name, as produced by the collector."""
    return Document(name=name, path=name, content=content)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def engine() -> CombinationEngine:
    return CombinationEngine()


@pytest.fixture
def validator() -> DirectiveValidator:
    return DirectiveValidator()


@pytest.fixture
def collector() -> DocumentCollector:
    return DocumentCollector()


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A small docs folder with templates, sources and plain markdown."""
    return write_tree(tmp_path / "docs", SAMPLE_TREE)
