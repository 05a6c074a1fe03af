"""Static render configuration and its validation.

Provides pydantic models for everything a run is parameterised by:
    - SizeClass: a named canvas resolution ("tv", "tvx2", "proj")
    - RenderConfig: size classes, density list, enabled patterns,
      post-process mode, output directory, worker count

There is no configuration file: DEFAULT_CONFIG is the static configuration,
and the CLI only overrides individual fields. Validation happens once, at
construction, so a bad density (e.g. 0, which would become a zero divisor in
the pattern formulas) is rejected before any job is dispatched.

Units:
    - Sizes: pixels
    - Densities: pattern-specific positive integers (see maketargets.patterns)

Usage:
    from maketargets.utils import validators

    cfg = validators.default_config(postprocess_mode="dither")
    cfg.size_class("tv").size   # Size(width=3840, height=2160)
"""

from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .geometry import Size

DENSITIES: Tuple[int, ...] = (2, 5, 10, 30, 60, 120, 480)

PostProcessMode = Literal["clamp", "dither", "none"]


class SizeClass(BaseModel):
    """Named canvas resolution."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Size-class name used in file names")
    width: int = Field(..., ge=2, description="Canvas width (px)")
    height: int = Field(..., ge=2, description="Canvas height (px)")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if "_" in v or "/" in v or v.strip() != v:
            raise ValueError(
                f"Size-class name must not contain '_', '/' or surrounding spaces, got: {v!r}"
            )
        return v

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


class RenderConfig(BaseModel):
    """Complete, validated configuration of one render run."""

    model_config = ConfigDict(frozen=True)

    size_classes: Tuple[SizeClass, ...] = Field(..., min_length=1)
    densities: Tuple[int, ...] = Field(DENSITIES, min_length=1)
    patterns: Optional[Tuple[str, ...]] = Field(
        None, description="Enabled pattern names in render order; None enables all"
    )
    postprocess_mode: PostProcessMode = "clamp"
    output_dir: Path = Path(".")
    workers: Optional[int] = Field(None, ge=1, description="Worker threads; None = CPU count")
    manifest: bool = False

    @field_validator('densities')
    @classmethod
    def validate_densities(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        bad = [d for d in v if d <= 0]
        if bad:
            raise ValueError(f"Densities must be positive integers, got {bad}")
        if len(set(v)) != len(v):
            raise ValueError(f"Densities must be unique, got {list(v)}")
        return v

    @field_validator('patterns')
    @classmethod
    def validate_patterns(cls, v: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if v is not None and len(v) == 0:
            raise ValueError("Pattern list must not be empty (use None to enable all)")
        return v

    @model_validator(mode='after')
    def validate_unique_size_classes(self) -> 'RenderConfig':
        names = [sc.name for sc in self.size_classes]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Duplicate size-class names: {dupes}")
        return self

    def size_class(self, name: str) -> SizeClass:
        """Look up a size class by name.

        Raises
        ------
        KeyError
            If no size class has that name
        """
        for sc in self.size_classes:
            if sc.name == name:
                return sc
        known = ", ".join(sc.name for sc in self.size_classes)
        raise KeyError(f"Unknown size class {name!r} (known: {known})")


DEFAULT_SIZE_CLASSES: Tuple[SizeClass, ...] = (
    SizeClass(name="tv", width=3840, height=2160),
    SizeClass(name="tvx2", width=3840 * 2, height=2160 * 2),
    SizeClass(name="proj", width=3840, height=2400),
)


def default_config(**overrides) -> RenderConfig:
    """Return the static configuration with selected fields overridden.

    Parameters
    ----------
    **overrides
        RenderConfig field values; ``None`` values are ignored so CLI
        arguments can be passed through unconditionally

    Returns
    -------
    RenderConfig
        Validated configuration

    Raises
    ------
    pydantic.ValidationError
        If an override is invalid
    """
    fields = {"size_classes": DEFAULT_SIZE_CLASSES, "densities": DENSITIES}
    fields.update({k: v for k, v in overrides.items() if v is not None})
    return RenderConfig(**fields)


DEFAULT_CONFIG = default_config()

__all__: List[str] = [
    "DENSITIES",
    "DEFAULT_CONFIG",
    "DEFAULT_SIZE_CLASSES",
    "PostProcessMode",
    "RenderConfig",
    "SizeClass",
    "default_config",
]
