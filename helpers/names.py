"""
Display name supply for new sessions
"""

import random

FIRST_NAMES = (
    "Ada", "Bram", "Cleo", "Dario", "Edith", "Felix", "Greta", "Hugo",
    "Iris", "Jonas", "Kira", "Leon", "Mira", "Nils", "Olive", "Pavel",
    "Quinn", "Rosa", "Silas", "Tessa", "Umar", "Vera", "Wren", "Yara",
)

COLORS = (
    "Amber", "Azure", "Coral", "Crimson", "Cyan", "Emerald", "Gold", "Indigo",
    "Ivory", "Jade", "Lavender", "Lime", "Magenta", "Olive", "Orange", "Plum",
    "Ruby", "Salmon", "Scarlet", "Silver", "Teal", "Violet",
)

_rng = random.SystemRandom()


def generate_display_name() -> str:
    """Random two-word capitalized name, e.g. 'Mira Teal'"""
    return f"{_rng.choice(FIRST_NAMES)} {_rng.choice(COLORS)}"
