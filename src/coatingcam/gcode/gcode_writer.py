"""Low-level G-code line formatting helpers."""

from __future__ import annotations

from typing import Optional

NOZZLE_ON = "M503"
NOZZLE_OFF = "M504"


def fmt(value: float, decimals: int = 3) -> str:
    """Format a float for G-code with a fixed number of decimals."""
    text = f"{value:.{decimals}f}"
    # Avoid "-0.000"
    if text.lstrip("-").strip("0.") == "":
        text = text.lstrip("-")
    return text


def _move(
    word: str,
    x: Optional[float],
    y: Optional[float],
    z: Optional[float],
    f: Optional[float],
) -> str:
    parts = [word]
    if f is not None:
        parts.append(f"F{fmt(f, 0)}")
    if x is not None:
        parts.append(f"X{fmt(x)}")
    if y is not None:
        parts.append(f"Y{fmt(y)}")
    if z is not None:
        parts.append(f"Z{fmt(z)}")
    return " ".join(parts)


def rapid(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    f: Optional[float] = None,
) -> str:
    """G0 travel move (non-depositing)."""
    return _move("G0", x, y, z, f)


def linear(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    f: Optional[float] = None,
) -> str:
    """G1 linear move (depositing when the nozzle is on)."""
    return _move("G1", x, y, z, f)


def comment(text: str) -> str:
    """Semicolon comment; text already starting with ';' is kept as is."""
    text = text.strip()
    if text.startswith(";"):
        return text
    return f"; {text}"


def nozzle(on: bool) -> str:
    return f"{NOZZLE_ON} ; Nozzle ON" if on else f"{NOZZLE_OFF} ; Nozzle OFF"
