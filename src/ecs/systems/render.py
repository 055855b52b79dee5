from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from esper import World

from ecs.components.game_state import GameMode
from ecs.constants import (
    BOARD_MARGIN,
    CELL_COLORS,
    CELL_SIZE,
    GRID_LINE_COLOR,
    HIGHLIGHT_COLOR,
)
from ecs.events.bus import (
    EventBus,
    EVENT_GAME_OVER,
    EVENT_GAME_STARTED,
    EVENT_HIGH_SCORE_RESULT,
)
from ecs.systems.engine import GameEngine

Color = Tuple[int, int, int]


@dataclass(slots=True)
class CellRect:
    left: float
    bottom: float
    size: float
    color: Color
    highlighted: bool = False


@dataclass(slots=True)
class BoardLayout:
    cells: List[CellRect] = field(default_factory=list)
    hud_lines: List[str] = field(default_factory=list)
    overlay: Optional[str] = None
    hud_left: float = 0.0
    hud_top: float = 0.0


class RenderSystem:
    """Draws the well, the falling atom and a text HUD with Arcade."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        window,
        engine: GameEngine,
        pending_garbage: Optional[Callable[[], int]] = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.engine = engine
        # Rows still on their way in; defaults to what the engine has queued.
        self.pending_garbage = pending_garbage or (lambda: engine.pending_garbage)
        self.overlay: Optional[str] = "Press R to start"
        self._last_layout: Optional[BoardLayout] = None
        self.event_bus.subscribe(EVENT_GAME_STARTED, self.on_game_started)
        self.event_bus.subscribe(EVENT_GAME_OVER, self.on_game_over)
        self.event_bus.subscribe(EVENT_HIGH_SCORE_RESULT, self.on_high_score_result)

    def on_game_started(self, sender, **kwargs):
        if kwargs.get('entity') == self.engine.entity:
            self.overlay = None

    def on_game_over(self, sender, **kwargs):
        if kwargs.get('entity') != self.engine.entity:
            return
        cause = kwargs.get('cause')
        self.overlay = cause.message if cause is not None else "Game Over!"

    def on_high_score_result(self, sender, **kwargs):
        if kwargs.get('entity') == self.engine.entity:
            self.overlay = kwargs.get('message') or self.overlay

    def build_layout(self) -> BoardLayout:
        """Compute every rectangle and HUD line for the current frame."""
        engine = self.engine
        board = engine.board
        highlighted = set(engine.highlighted_positions())
        layout = BoardLayout(overlay=self.overlay)
        top = BOARD_MARGIN + board.rows * CELL_SIZE
        for y in range(board.rows):
            bottom = top - (y + 1) * CELL_SIZE
            for x in range(board.cols):
                left = BOARD_MARGIN + x * CELL_SIZE
                cell = board.get(x, y)
                lit = (x, y) in highlighted
                color = HIGHLIGHT_COLOR if lit else CELL_COLORS[cell.value]
                layout.cells.append(CellRect(left, bottom, CELL_SIZE, color, lit))
        piece = engine.active
        if piece is not None:
            left = BOARD_MARGIN + piece.x * CELL_SIZE
            bottom = top - (piece.y + 1) * CELL_SIZE
            layout.cells.append(CellRect(left, bottom, CELL_SIZE, CELL_COLORS[piece.element.value]))
        target = engine.target
        layout.hud_lines = [
            f"Player: {engine.identity.username}",
            f"Score: {engine.score}",
            f"Target: {target.name}",
            f"Pattern: {target.pattern}",
            f"Speed: x{engine.speed_ratio:.2f}",
        ]
        incoming = self.pending_garbage()
        if incoming:
            layout.hud_lines.append(f"Incoming: {incoming}")
        if engine.mode == GameMode.CLEARING:
            layout.hud_lines.append("Matched!")
        layout.hud_left = BOARD_MARGIN * 2 + board.cols * CELL_SIZE
        layout.hud_top = top
        self._last_layout = layout
        return layout

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        layout = self.build_layout()
        try:
            arcade.get_window()
        except Exception:
            return layout
        for rect in layout.cells:
            right = rect.left + rect.size
            top = rect.bottom + rect.size
            arcade.draw_lrbt_rectangle_filled(rect.left, right, rect.bottom, top, rect.color)
            arcade.draw_lrbt_rectangle_outline(rect.left, right, rect.bottom, top, GRID_LINE_COLOR, 1)
        text_y = layout.hud_top - 24
        for line in layout.hud_lines:
            arcade.draw_text(line, layout.hud_left, text_y, arcade.color.WHITE, 14)
            text_y -= 24
        if layout.overlay:
            arcade.draw_text(
                layout.overlay,
                self.window.width / 2,
                self.window.height / 2,
                arcade.color.YELLOW,
                22,
                anchor_x="center",
            )
        return layout

    def cell_colors(self) -> Dict[Tuple[int, int], Color]:
        """Colour per board cell from the last built layout (debug/tests)."""
        layout = self._last_layout or self.build_layout()
        rows = self.engine.board.rows
        cols = self.engine.board.cols
        result: Dict[Tuple[int, int], Color] = {}
        for index, rect in enumerate(layout.cells[: rows * cols]):
            result[(index % cols, index // cols)] = rect.color
        return result
