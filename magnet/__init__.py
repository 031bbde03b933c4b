"""Magnet-link parsing and building."""

from .utils import (
  MagnetLink,
  MagnetParseError,
  MagnetValidationResult,
  build_magnet,
  parse_magnet,
  validate_magnet,
)

__all__ = [
  "MagnetLink",
  "MagnetParseError",
  "MagnetValidationResult",
  "build_magnet",
  "parse_magnet",
  "validate_magnet",
]
