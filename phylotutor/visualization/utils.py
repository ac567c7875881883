"""Shared display helpers for matrices, steps and trees."""

import re
from fractions import Fraction


def num_from(lbl):
    """Extract the numeric suffix from a label.

    Examples:
        >>> num_from("Seq5")
        5
        >>> num_from("Species12")
        12
        >>> num_from("(Seq1,Seq2)")
    """
    if lbl is None:
        return None
    m = re.search(r"(\d+)$", str(lbl))
    return int(m.group(1)) if m else None


def natural_key(lbl):
    """Sort key placing ``Seq2`` before ``Seq10``; merged ids sort after leaves."""
    text = str(lbl)
    number = num_from(text)
    prefix = text[:-len(str(number))] if number is not None else text
    return (text.startswith('('), prefix, number if number is not None else -1, text)


def format_distance(value, decimals=2, exact=True):
    """Format a distance for display.

    With ``exact`` the fraction itself is shown (``37/3``); otherwise the
    value is rounded to ``decimals`` places, dropping the decimals of whole numbers.

    Examples:
        >>> format_distance(Fraction(37, 3))
        '37/3'
        >>> format_distance(Fraction(37, 3), exact=False)
        '12.33'
        >>> format_distance(Fraction(7), exact=False)
        '7'
    """
    if value is None:
        return '-'
    value = Fraction(value)
    if exact:
        return str(value)
    rounded = round(float(value), decimals)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.{decimals}f}"


__all__ = ['num_from', 'natural_key', 'format_distance']
