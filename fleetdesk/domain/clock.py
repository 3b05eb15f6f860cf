"""Comparing timestamps that may or may not carry a timezone."""

from datetime import datetime


def on_clock_of(moment: datetime, reference: datetime) -> datetime:
    """Express *moment* on the same clock as *reference* so they compare safely.

    A naive *reference* is the local clock; a naive *moment* is taken to be
    on *reference*'s clock already.
    """
    if moment.tzinfo is None:
        return moment if reference.tzinfo is None else moment.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None:
        return moment.astimezone().replace(tzinfo=None)
    return moment.astimezone(reference.tzinfo)
