"""Latency phase decomposition for HTTP probe timing blocks.

A probe records ten raw instants (start/done pairs for DNS, connect, TLS,
first byte and transfer). Each phase is ``done - start``. Negative phases
from clock skew in the source data are passed through unchanged.
"""

import json
from typing import Any, Mapping

from probe_store.models.probe_result import HttpTiming, TimingPhases

# phase name -> (start key, done key)
PHASES = {
  'dns': ('dnsStart', 'dnsDone'),
  'connect': ('connectStart', 'connectDone'),
  'tls': ('tlsHandshakeStart', 'tlsHandshakeDone'),
  'ttfb': ('firstByteStart', 'firstByteDone'),
  'transfer': ('transferStart', 'transferDone'),
}


def calculate_timing(timing: HttpTiming | Mapping[str, Any] | None) -> TimingPhases | None:
  """Decompose a timing block into phase durations.

  Args:
      timing: Validated timing model or a mapping keyed by the wire names

  Returns:
      Phase durations, or None when no timing was recorded
  """
  if timing is None:
    return None
  if isinstance(timing, HttpTiming):
    timing = timing.model_dump(by_alias=True)
  return TimingPhases(**{
    phase: timing[done] - timing[start] for phase, (start, done) in PHASES.items()
  })


def calculate_timing_from_json(raw: str | bytes | Mapping[str, Any] | None) -> TimingPhases | None:
  """Decompose a stored timing blob, best effort.

  Any malformed payload (bad JSON, wrong shape, missing or non-numeric
  instants) yields None instead of raising, so one bad row never aborts a
  multi-row read.

  Args:
      raw: Serialized timing as stored, or an already-decoded mapping

  Returns:
      Phase durations, or None when unavailable
  """
  if raw is None:
    return None
  try:
    timing = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
    if not isinstance(timing, Mapping):
      return None
    for start, done in PHASES.values():
      for key in (start, done):
        value = timing[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
          return None
    return calculate_timing(timing)
  except (ValueError, TypeError, KeyError):
    return None
