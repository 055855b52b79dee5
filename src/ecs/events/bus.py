from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, /, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)


# ============================================================================
# INPUT
# ============================================================================
EVENT_INPUT_MOVE = "input_move"                    # payload: entity=int|None, dx=int
EVENT_INPUT_SOFT_DROP = "input_soft_drop"          # payload: entity=int|None, active=bool
EVENT_INPUT_HARD_DROP = "input_hard_drop"          # payload: entity=int|None
EVENT_INPUT_RESTART = "input_restart"              # payload: entity=int|None


# ============================================================================
# PIECES & BOARD
# ============================================================================
EVENT_PIECE_SPAWNED = "piece_spawned"              # payload: entity=int, x=int, y=int, element=Cell
EVENT_PIECE_MOVED = "piece_moved"                  # payload: entity=int, x=int, y=int
EVENT_PIECE_LOCKED = "piece_locked"                # payload: entity=int, x=int, y=int, element=Cell
EVENT_MATCH_FOUND = "match_found"                  # payload: entity=int, positions=[(x,y),...], pattern=str, target_name=str, score=int, chained=bool
EVENT_MATCH_CLEARED = "match_cleared"              # payload: entity=int, positions=[(x,y),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: entity=int, moves=list[GravityMove]
EVENT_GARBAGE_APPLIED = "garbage_applied"          # payload: entity=int, rows=int, gaps=list[int]


# ============================================================================
# TARGET, SCORE & SPEED
# ============================================================================
EVENT_TARGET_CHANGED = "target_changed"            # payload: entity=int, target_name=str, pattern=str
EVENT_SPEED_CHANGED = "speed_changed"              # payload: entity=int, current_ms=float, ratio=float


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_STARTED = "game_started"                # payload: entity=int
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: entity=int, previous_mode=GameMode, new_mode=GameMode
EVENT_GAME_OVER = "game_over"                      # payload: entity=int, cause=GameOverCause, score=int
EVENT_HIGH_SCORE_RESULT = "high_score_result"      # payload: entity=int, is_top=bool, message=str


# ============================================================================
# MULTIPLAYER
# ============================================================================
EVENT_GARBAGE_SENT = "garbage_sent"                # payload: entity=int, to_player_id=str, rows=int
EVENT_SNAPSHOT_PUBLISHED = "snapshot_published"    # payload: entity=int, snapshot=PlayerSnapshot
