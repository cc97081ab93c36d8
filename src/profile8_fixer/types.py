"""Shared type aliases for profile fixer modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

type ColorMode = Literal["auto", "always", "never"]
type FormatId = Literal["bg3"]
type Environment = Mapping[str, str]
