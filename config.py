"""Configuration helpers for the uTorrent WebUI client."""

from __future__ import annotations

import os
from dataclasses import dataclass


class ConfigError(RuntimeError):
  """Raised when the environment does not describe a usable configuration."""


@dataclass(frozen=True)
class UTorrentConfig:
  """Configuration required to talk to the uTorrent WebUI."""

  url: str
  username: str
  password: str
  timeout: float = 10.0
  poll_delay: float = 1.0
  poll_retries: int = 5


def _env_float(name: str, default: str) -> float:
  raw = os.environ.get(name, default).strip() or default
  try:
    value = float(raw)
  except ValueError as exc:
    raise ConfigError(f"{name} must be a number, got {raw!r}.") from exc
  if value < 0:
    raise ConfigError(f"{name} must not be negative, got {raw!r}.")
  return value


def _env_int(name: str, default: str) -> int:
  raw = os.environ.get(name, default).strip() or default
  try:
    value = int(raw)
  except ValueError as exc:
    raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc
  if value < 0:
    raise ConfigError(f"{name} must not be negative, got {raw!r}.")
  return value


def load_config() -> UTorrentConfig:
  """Load configuration from environment variables."""

  url = os.environ.get("UTORRENT_URL", "").strip()
  username = os.environ.get("UTORRENT_USER", "").strip()
  password = os.environ.get("UTORRENT_PASS", "").strip()

  missing = [
    name
    for name, value in (("UTORRENT_URL", url), ("UTORRENT_USER", username), ("UTORRENT_PASS", password))
    if not value
  ]
  if missing:
    missing_envs = ", ".join(missing)
    raise ConfigError(f"Missing required environment variables: {missing_envs}.")

  return UTorrentConfig(
    url=url,
    username=username,
    password=password,
    timeout=_env_float("UTORRENT_TIMEOUT", "10.0"),
    poll_delay=_env_float("UTORRENT_POLL_DELAY", "1.0"),
    poll_retries=_env_int("UTORRENT_POLL_RETRIES", "5"),
  )


__all__ = ["ConfigError", "UTorrentConfig", "load_config"]
