"""Shared fixtures: transfer LUTs and small render configurations."""

import pytest

from maketargets.utils.color import build_luts
from maketargets.utils.geometry import Size
from maketargets.utils.validators import RenderConfig, SizeClass


@pytest.fixture(scope="session")
def luts():
    """All transfer LUTs (built once per test session)."""
    return build_luts()


@pytest.fixture
def small_size():
    """Landscape canvas small enough for every pattern at density 5."""
    return Size(64, 48)


@pytest.fixture
def tiny_config(tmp_path):
    """One 32×24 size class, two densities, three patterns."""
    return RenderConfig(
        size_classes=(SizeClass(name="tiny", width=32, height=24),),
        densities=(2, 5),
        patterns=("rings", "check", "polkaDot"),
        output_dir=tmp_path,
        workers=2,
    )
