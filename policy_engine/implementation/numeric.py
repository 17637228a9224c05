"""Numeric helpers shared by the load, timeline and cost models."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with halves rounded towards +infinity.

    Python's built-in ``round`` uses banker's rounding (``round(16.5) == 16``);
    capacity units, week estimates and political cost always round halves up.
    """
    return math.floor(value + 0.5)
