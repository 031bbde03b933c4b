from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl, quote, unquote, urlencode

LOG = logging.getLogger(__name__)

MAGNET_PREFIX = "magnet:?"
BTIH_PREFIX = "urn:btih:"
BTIH_HEX_LENGTH = 40
BTIH_BASE32_LENGTH = 32


class MagnetParseError(ValueError):
  pass


@dataclass(frozen=True)
class MagnetLink:
  """A parsed ``magnet:`` URI. ``info_hash`` is always 40 upper-case hex digits."""

  info_hash: str
  name: Optional[str] = None
  trackers: Tuple[str, ...] = ()

  @property
  def encoded(self) -> str:
    pairs: List[Tuple[str, str]] = [("xt", f"{BTIH_PREFIX}{self.info_hash}")]
    if self.name:
      pairs.append(("dn", self.name))
    pairs.extend(("tr", tracker) for tracker in self.trackers)
    return MAGNET_PREFIX + urlencode(pairs, quote_via=quote, safe=":/")

  @property
  def decoded(self) -> str:
    return unquote(self.encoded)

  def __str__(self) -> str:
    return self.encoded


@dataclass
class MagnetValidationResult:
  magnet: str
  is_valid: bool
  components: Dict[str, Any] = field(default_factory=dict)
  errors: List[str] = field(default_factory=list)

  def first_error(self) -> str:
    return self.errors[0] if self.errors else ""


def validate_magnet(magnet: str) -> MagnetValidationResult:
  magnet = magnet or ""
  errors: List[str] = []
  components: Dict[str, Any] = {}

  if not magnet:
    errors.append("Magnet link cannot be empty.")
    return MagnetValidationResult(magnet=magnet, is_valid=False, components=components, errors=errors)

  if any(ord(ch) < 32 for ch in magnet):
    errors.append("Magnet link contains control characters which are not allowed.")

  if not magnet.lower().startswith(MAGNET_PREFIX):
    errors.append("Magnet link must start with 'magnet:?'.")
    return MagnetValidationResult(magnet=magnet, is_valid=False, components=components, errors=errors)

  params = _query_pairs(magnet)

  xt_values = [value for key, value in params if key == "xt"]
  btih_values = [value for value in xt_values if value.lower().startswith(BTIH_PREFIX)]
  if not xt_values or not xt_values[0]:
    errors.append("Missing required xt parameter.")
  elif not btih_values:
    errors.append("xt parameter must start with 'urn:btih:'.")
  else:
    ok, normalized_hash, err = _normalize_info_hash(btih_values[0][len(BTIH_PREFIX) :])
    if ok and normalized_hash:
      components["info_hash"] = normalized_hash
    else:
      errors.append(err or "Invalid BTIH info hash.")

  display_name = next((value for key, value in params if key == "dn"), None)
  if display_name:
    components["display_name"] = display_name

  components["trackers"] = [value for key, value in params if key == "tr" and value]

  for key, _ in params:
    if key not in {"xt", "dn", "tr"}:
      LOG.debug("Magnet parameter '%s' ignored as it is not recognized.", key)

  return MagnetValidationResult(
    magnet=magnet,
    is_valid=not errors,
    components=components,
    errors=errors,
  )


def parse_magnet(magnet: str) -> MagnetLink:
  """Parse ``magnet``, raising :class:`MagnetParseError` on the first problem."""
  result = validate_magnet(magnet)
  if not result.is_valid:
    raise MagnetParseError(result.first_error())
  return MagnetLink(
    info_hash=result.components["info_hash"],
    name=result.components.get("display_name"),
    trackers=tuple(result.components["trackers"]),
  )


def build_magnet(info_hash: str, name: Optional[str] = None, trackers: Iterable[str] = ()) -> MagnetLink:
  ok, normalized_hash, err = _normalize_info_hash(info_hash)
  if not ok or not normalized_hash:
    raise MagnetParseError(err or "Invalid BTIH info hash.")
  return MagnetLink(info_hash=normalized_hash, name=name, trackers=tuple(trackers))


def _query_pairs(magnet: str) -> List[Tuple[str, str]]:
  query = magnet[len(MAGNET_PREFIX) :]
  # Whole-link encoding ("xt%3Durn%3Abtih...") hides the separators.
  if "=" not in query and "%3d" in query.lower():
    query = unquote(query)
  return parse_qsl(query, keep_blank_values=True)


def _normalize_info_hash(value: str) -> Tuple[bool, Optional[str], Optional[str]]:
  candidate = (value or "").strip()
  if len(candidate) == BTIH_HEX_LENGTH and _is_hex(candidate):
    return True, candidate.upper(), None

  if len(candidate) == BTIH_BASE32_LENGTH:
    try:
      decoded = base64.b32decode(candidate.upper(), casefold=True)
    except binascii.Error as exc:
      return False, None, f"BTIH base32 decoding failed: {exc}."

    if len(decoded) != BTIH_HEX_LENGTH // 2:
      return False, None, "Decoded BTIH info hash must be 20 bytes."

    return True, decoded.hex().upper(), None

  return (
    False,
    None,
    "BTIH info hash must be 40 hexadecimal characters or 32 base32 characters.",
  )


def _is_hex(value: str) -> bool:
  try:
    int(value, 16)
    return True
  except ValueError:
    return False
