"""
Conversion between byte counts and the unit-labelled sizes used by the kernel.

Memory fields in ``/proc/<pid>/status`` carry a unit suffix (in practice
always ``kB``). Both directions use 1024 multiples.
"""

from typing import Dict, Tuple

from .exceptions import ParseError

KIB = 1024
MIB = 1024 * 1024
GIB = 1024 * 1024 * 1024

# Suffixes exactly as emitted by the kernel interface.
SIZE_UNITS: Dict[str, int] = {
    "B": 1,
    "kB": KIB,
    "mB": MIB,
    "gB": GIB,
}

# Largest unit first; a value is printed in a unit only when it exceeds it.
_FORMAT_STEPS: Tuple[Tuple[int, str], ...] = (
    (GIB, "gB"),
    (MIB, "mB"),
    (KIB, "kB"),
)


def parse_labeled_size(size: str) -> int:
    """
    Parse a size such as ``"1234 kB"`` into a number of bytes.

    Raises:
        ParseError: If the value is not ``<digits> <unit>`` with a known unit.
    """
    number, sep, unit = size.strip().partition(" ")
    if not sep or not number.isdigit():
        raise ParseError(f"unrecognized size label: {size!r}")
    multiplier = SIZE_UNITS.get(unit)
    if multiplier is None:
        raise ParseError(f"unrecognized size label: {size!r}")
    return int(number) * multiplier


def format_size(size: int) -> str:
    """Format a byte count with the largest unit it exceeds, truncating."""
    for multiplier, unit in _FORMAT_STEPS:
        if size > multiplier:
            return f"{size // multiplier} {unit}"
    return f"{size} B"
