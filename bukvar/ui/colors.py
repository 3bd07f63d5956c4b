"""Theme colors and color utilities for the game screen."""

VOWELS = frozenset("АЕЁИОУЫЭЮЯ")


class GameColors:
    """Dark board palette: blue letter tiles on a near-black grid."""

    BG = "#171717"
    PANEL = "#262626"
    PANEL_BORDER = "#404040"

    CELL = "rgba(38, 38, 38, 0.3)"
    CELL_BORDER = "#374151"
    CELL_HOVER = "#6b7280"

    TILE_VOWEL = "#1d4ed8"
    TILE_VOWEL_EDGE = "#1e3a8a"
    TILE_CONSONANT = "#2563eb"
    TILE_CONSONANT_EDGE = "#1e40af"
    TILE_TEXT = "#ffffff"

    STEP_DONE = "#22c55e"
    STEP_CURRENT = "#525252"
    STEP_PENDING = "#262626"

    STAR_ON = "#facc15"
    STAR_OFF = "#4b5563"

    BUTTON = "#2563eb"
    BUTTON_HOVER = "#3b82f6"
    BUTTON_BACK = "#374151"
    BUTTON_NEXT = "#16a34a"

    TEXT_PRIMARY = "#ffffff"


def tile_colors(char: str) -> tuple[str, str]:
    """Return (fill, bottom edge) for a letter tile; vowels are a shade darker."""
    if char.upper() in VOWELS:
        return GameColors.TILE_VOWEL, GameColors.TILE_VOWEL_EDGE
    return GameColors.TILE_CONSONANT, GameColors.TILE_CONSONANT_EDGE


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
