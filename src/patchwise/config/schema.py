"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OutputFormat = Literal["terminal", "json"]

OUTPUT_FORMATS = ("terminal", "json")


@dataclass
class ApplyConfig:
    fuzz_threshold: int = 0  # cumulative fuzz above this is reported
    fail_on_fuzz: bool = False  # if True, fuzz above threshold aborts the apply
    encoding: str = "utf-8"
    allow_absolute_paths: bool = False


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_summary: bool = True


@dataclass
class PatchwiseConfig:
    version: str = "1.0"
    apply: ApplyConfig = field(default_factory=ApplyConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
