"""
Animica Lottery package.

A recurring, trust-minimised lottery driven by an external verifiable
randomness coordinator:

- participants pay a fixed fee to enter the open round,
- an upkeep trigger closes the round once the interval has elapsed,
- the coordinator later delivers a random word and the round pays out the
  whole balance to a single winner before reopening.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
