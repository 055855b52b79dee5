BOARD_WIDTH = 10
BOARD_HEIGHT = 12

# Fall timing (milliseconds per row step).
BASE_TICK_MS = 280
MIN_TICK_MS = 80
SPEED_BOOST_FACTOR = 0.9
SOFT_DROP_STEPS = 2

# Visual hold before matched cells are removed; the fall timer is paused meanwhile.
CLEAR_HIGHLIGHT_MS = 500

# Garbage rows applied in a single injection (and the cap on queued rows).
MAX_GARBAGE_ROWS = 6

# Oxygen odds for spawned atoms; the late value applies once score reaches the threshold.
OXYGEN_CHANCE_EARLY = 0.15
OXYGEN_CHANCE_LATE = 0.25
OXYGEN_SCORE_THRESHOLD = 4

# Rendering geometry
CELL_SIZE = 36
BOARD_MARGIN = 24
HUD_WIDTH = 260
WINDOW_TITLE = "Molecule Drop"

CELL_COLORS = {
    '.': (24, 26, 32),
    'C': (90, 90, 96),
    'O': (200, 60, 60),
    'G': (110, 84, 60),
}
HIGHLIGHT_COLOR = (250, 220, 90)
GRID_LINE_COLOR = (44, 48, 58)
