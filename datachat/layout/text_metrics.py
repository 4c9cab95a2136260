"""
Label measurement for node rectangles.

Widths are Helvetica advance widths (AFM, 1/1000 em), which is what a
12px sans-serif label renders close to. Any callable ``(text, font_size)
-> width`` can replace the default measurer.
"""

from typing import Callable, Dict

from ..config import LayoutConfig


TextMeasurer = Callable[[str, float], float]

# Characters outside the table measure as a digit
DEFAULT_ADVANCE = 556

HELVETICA_ADVANCES: Dict[str, int] = {
    " ": 278, "!": 278, '"': 355, "#": 556, "$": 556, "%": 889, "&": 667,
    "'": 191, "(": 333, ")": 333, "*": 389, "+": 584, ",": 278, "-": 333,
    ".": 278, "/": 278,
    "0": 556, "1": 556, "2": 556, "3": 556, "4": 556,
    "5": 556, "6": 556, "7": 556, "8": 556, "9": 556,
    ":": 278, ";": 278, "<": 584, "=": 584, ">": 584, "?": 556, "@": 1015,
    "A": 667, "B": 667, "C": 722, "D": 722, "E": 667, "F": 611, "G": 778,
    "H": 722, "I": 278, "J": 500, "K": 667, "L": 556, "M": 833, "N": 722,
    "O": 778, "P": 667, "Q": 778, "R": 722, "S": 667, "T": 611, "U": 722,
    "V": 667, "W": 944, "X": 667, "Y": 667, "Z": 611,
    "[": 278, "\\": 278, "]": 278, "^": 469, "_": 556, "`": 333,
    "a": 556, "b": 556, "c": 500, "d": 556, "e": 556, "f": 278, "g": 556,
    "h": 556, "i": 222, "j": 222, "k": 500, "l": 222, "m": 833, "n": 556,
    "o": 556, "p": 556, "q": 556, "r": 333, "s": 500, "t": 278, "u": 556,
    "v": 500, "w": 722, "x": 500, "y": 500, "z": 500,
    "{": 334, "|": 260, "}": 334, "~": 584,
}


def measure_text(text: str, font_size: float = 12) -> float:
    """Rendered width of text in pixels."""
    units = sum(HELVETICA_ADVANCES.get(ch, DEFAULT_ADVANCE) for ch in str(text))
    return units * font_size / 1000


def rect_width(label: str, config: LayoutConfig,
               measurer: TextMeasurer = measure_text) -> float:
    """Node rectangle width: label plus padding, never below the minimum."""
    return max(config.min_node_width, measurer(label, config.font_size) + config.label_padding)
