from ecs.components.game_state import GameMode, GameOverCause
from ecs.constants import CELL_COLORS, HIGHLIGHT_COLOR
from ecs.events.records import GarbageEvent
from ecs.events.shared_state import GARBAGE_KEY, SharedStateBus
from ecs.systems.garbage_system import GarbageSystem
from ecs.systems.render import RenderSystem
from tests.helpers import drop_carbon_at, new_game


class DummyWindow:
    def __init__(self, width=700, height=500):
        self.width = width
        self.height = height


def setup_render():
    bus, world, engine = new_game()
    render = RenderSystem(world, bus, DummyWindow(), engine)
    return bus, world, engine, render


def test_layout_covers_board_and_active_piece():
    bus, world, engine, render = setup_render()
    assert render.build_layout().overlay == "Press R to start"
    engine.start()
    layout = render.build_layout()
    assert len(layout.cells) == 10 * 12 + 1
    assert layout.overlay is None
    assert "Target: ethane" in layout.hud_lines
    assert "Score: 0" in layout.hud_lines


def test_matched_cells_are_highlighted():
    bus, world, engine, render = setup_render()
    engine.start()
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    render.build_layout()
    colors = render.cell_colors()
    assert colors[(5, 11)] == HIGHLIGHT_COLOR
    assert colors[(6, 11)] == HIGHLIGHT_COLOR
    assert colors[(4, 11)] == CELL_COLORS['.']
    assert "Matched!" in render.build_layout().hud_lines


def test_game_over_overlay_names_cause():
    bus, world, engine, render = setup_render()
    engine.start()
    engine.end_game(GameOverCause.GARBAGE_OVERFLOW)
    assert render.build_layout().overlay == "Garbage overflow!"


def test_hud_shows_garbage_waiting_in_channel():
    bus, world, engine = new_game()
    shared = SharedStateBus()
    garbage = GarbageSystem(world, bus, shared, engine)
    render = RenderSystem(world, bus, DummyWindow(), engine, pending_garbage=garbage.pending_rows)
    engine.start()
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    assert engine.mode == GameMode.CLEARING
    shared.set(GARBAGE_KEY, (
        GarbageEvent("g1", "rival", engine.identity.player_id, 1, 1.0),
        GarbageEvent("g2", "rival", engine.identity.player_id, 2, 1.0),
    ))
    assert "Incoming: 3" in render.build_layout().hud_lines
    garbage.consume()
    assert not any(line.startswith("Incoming") for line in render.build_layout().hud_lines)
