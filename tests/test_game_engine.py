import pytest

from ecs.components.cell import Cell
from ecs.components.game_state import GameMode, GameOverCause
from ecs.components.score import Score
from ecs.constants import BASE_TICK_MS, MAX_GARBAGE_ROWS, MIN_TICK_MS
from ecs.events.bus import (
    EVENT_GAME_OVER,
    EVENT_GARBAGE_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_SPEED_CHANGED,
    EVENT_TARGET_CHANGED,
)
from ecs.events.results import Locked
from ecs.factories.molecules import Molecule
from tests.helpers import ETHANE, UNMATCHABLE, drop_carbon_at, new_game, place, record

METHANOL = Molecule("methanol", "CO")


def test_start_spawns_at_top_centre():
    bus, world, engine = new_game()
    result = engine.start()
    assert engine.mode == GameMode.RUNNING
    assert result.spawned is not None
    assert (engine.active.x, engine.active.y) == (5, 0)
    assert engine.active.element in (Cell.CARBON, Cell.OXYGEN)
    assert engine.target == ETHANE


def test_ethane_end_to_end():
    bus, world, engine = new_game(width=10, height=12)
    found = record(bus, EVENT_MATCH_FOUND)
    cleared = record(bus, EVENT_MATCH_CLEARED)
    engine.start()

    first = drop_carbon_at(engine, 5)
    assert first.locked == Locked(x=5, y=11, element=Cell.CARBON)
    assert first.match is None
    assert first.spawned is not None

    second = drop_carbon_at(engine, 4)
    assert second.locked == Locked(x=4, y=11, element=Cell.CARBON)
    assert second.match is not None
    assert second.match.score == 1
    assert engine.score == 1
    assert engine.mode == GameMode.CLEARING
    assert engine.active is None
    assert engine.highlighted_positions() == [(4, 11), (5, 11)]
    assert found and found[0]['positions'] == [(4, 11), (5, 11)]
    # Cells stay on the board until the highlight completes.
    assert engine.board.get(4, 11) is Cell.CARBON

    done = engine.finish_clear()
    assert cleared and cleared[0]['positions'] == [(4, 11), (5, 11)]
    assert engine.board.row_strings()[11] == "." * 10
    assert engine.mode == GameMode.RUNNING
    assert done.spawned is not None
    assert engine.score == 1


def test_clear_speeds_up_the_fall():
    bus, world, engine = new_game()
    engine.start()
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    assert engine.speed.current_ms == pytest.approx(BASE_TICK_MS * 0.9)
    assert engine.speed_ratio == pytest.approx(1 / 0.9)


def test_speed_never_increases_and_stops_at_floor():
    bus, world, engine = new_game()
    changes = record(bus, EVENT_SPEED_CHANGED)
    previous = engine.speed.current_ms
    for _ in range(40):
        engine.boost_speed(1)
        current = engine.speed.current_ms
        assert current <= previous
        assert MIN_TICK_MS <= current <= BASE_TICK_MS
        previous = current
    assert engine.speed.current_ms == MIN_TICK_MS
    assert engine.boost_speed(1) is False
    assert engine.boost_speed(0) is False
    assert all(c['current_ms'] >= MIN_TICK_MS for c in changes)


def test_blocked_spawn_ends_game():
    bus, world, engine = new_game()
    overs = record(bus, EVENT_GAME_OVER)
    engine.start()
    place(engine.board, {(5, y): Cell.GARBAGE for y in range(1, 12)})
    result = engine.hard_drop()
    assert result.locked == Locked(x=5, y=0, element=result.locked.element)
    assert result.game_over is not None
    assert result.game_over.cause is GameOverCause.SPAWN_BLOCKED
    assert engine.mode == GameMode.OVER
    assert engine.active is None
    assert engine.state.over_cause is GameOverCause.SPAWN_BLOCKED
    assert len(overs) == 1
    assert engine.move_horizontal(1) is None
    assert engine.tick().events == ()


def test_tick_moves_one_row_or_two_when_soft_dropping():
    bus, world, engine = new_game((UNMATCHABLE,))
    assert engine.tick().events == ()
    engine.start()
    engine.tick()
    assert engine.active.y == 1
    assert engine.set_soft_drop(True)
    engine.tick()
    assert engine.active.y == 3
    engine.set_soft_drop(False)
    engine.tick()
    assert engine.active.y == 4


def test_tick_locks_on_floor_and_respawns():
    bus, world, engine = new_game((UNMATCHABLE,))
    engine.start()
    element = engine.active.element
    for _ in range(11):
        assert engine.tick().events == ()
    assert engine.active.y == 11
    result = engine.tick()
    assert result.locked == Locked(x=5, y=11, element=element)
    assert engine.board.get(5, 11) is element
    assert (engine.active.x, engine.active.y) == (5, 0)


def test_horizontal_moves_respect_walls_and_atoms():
    bus, world, engine = new_game((UNMATCHABLE,))
    engine.start()
    place(engine.board, {(4, 0): Cell.OXYGEN})
    assert engine.move_horizontal(-1) is None
    for _ in range(10):
        engine.move_horizontal(1)
    assert engine.active.x == 9
    assert engine.move_horizontal(1) is None
    assert engine.move_horizontal(0) is None


def test_new_target_already_on_board_chains_a_clear():
    bus, world, engine = new_game((ETHANE, METHANOL))
    found = record(bus, EVENT_MATCH_FOUND)
    engine.start()
    place(engine.board, {(0, 11): Cell.CARBON, (0, 10): Cell.OXYGEN, (8, 11): Cell.CARBON})
    first = drop_carbon_at(engine, 8)
    assert first.match is not None and not first.match.chained

    chained = engine.finish_clear()
    assert chained.match is not None and chained.match.chained
    assert engine.mode == GameMode.CLEARING
    assert engine.score == 2

    resumed = engine.finish_clear()
    assert resumed.spawned is not None
    assert engine.mode == GameMode.RUNNING
    assert all(row == "." * 10 for row in engine.board.row_strings())
    assert [f['chained'] for f in found] == [False, True]
    assert engine.speed.current_ms == pytest.approx(BASE_TICK_MS * 0.81)


def test_stale_generation_does_not_clear():
    bus, world, engine = new_game()
    engine.start()
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    generation = engine.state.generation
    assert engine.finish_clear(generation - 1).events == ()
    assert engine.mode == GameMode.CLEARING
    assert engine.board.get(5, 11) is Cell.CARBON


def test_reset_restores_fresh_idle_game():
    bus, world, engine = new_game(width=8, height=9, tick_ms=300)
    engine.start()
    drop_carbon_at(engine, 4)
    drop_carbon_at(engine, 3)
    generation = engine.state.generation
    engine.queue_garbage(2)
    engine.reset()
    assert engine.mode == GameMode.IDLE
    assert engine.score == 0
    assert engine.active is None
    assert engine.highlight is None
    assert engine.pending_garbage == 0
    assert engine.speed.current_ms == 300
    assert engine.state.generation == generation + 1
    assert engine.board.rows == 9 and engine.board.cols == 8
    assert all(row == "." * 8 for row in engine.board.row_strings())
    assert engine.target == ETHANE


def test_garbage_rows_capped_and_piece_lifted():
    bus, world, engine = new_game((UNMATCHABLE,))
    applied = record(bus, EVENT_GARBAGE_APPLIED)
    engine.start()
    engine.active.y = 8
    assert engine.add_garbage_rows(3)
    assert engine.active.y == 5
    assert engine.add_garbage_rows(10)
    assert engine.active.y == 0
    assert [a['rows'] for a in applied] == [3, MAX_GARBAGE_ROWS]
    bottom = engine.board.row_strings()[-1]
    assert bottom.count("G") == 9 and bottom.count(".") == 1


def test_garbage_refused_when_top_rows_occupied():
    bus, world, engine = new_game((UNMATCHABLE,))
    engine.start()
    place(engine.board, {(0, 1): Cell.CARBON})
    before = engine.board.row_strings()
    assert engine.add_garbage_rows(2) is False
    assert engine.board.row_strings() == before


def test_pending_garbage_overflow_ends_game():
    bus, world, engine = new_game((UNMATCHABLE,))
    engine.start()
    place(engine.board, {(0, 0): Cell.GARBAGE})
    assert engine.queue_garbage(4) == 4
    assert engine.queue_garbage(4) == MAX_GARBAGE_ROWS
    over = engine.apply_pending_garbage()
    assert over is not None
    assert over.cause is GameOverCause.GARBAGE_OVERFLOW
    assert engine.mode == GameMode.OVER
    assert engine.pending_garbage == 0


def test_snapshot_reflects_game():
    bus, world, engine = new_game(player_id="p1", username="Ada", avatar="ada.png")
    engine.start()
    world.component_for_entity(engine.entity, Score).value = 3
    snap = engine.snapshot(now=12.5)
    assert snap.player_id == "p1"
    assert snap.username == "Ada"
    assert snap.status == "playing"
    assert snap.score == 3
    assert len(snap.board) == 12 and snap.board[0] == "." * 10
    data = snap.to_dict()
    assert data["target"] == {"name": "ethane", "pattern": "CC"}
    assert data["lastUpdate"] == 12.5
    assert data["speedRatio"] == pytest.approx(1.0)
    engine.end_game(GameOverCause.SPAWN_BLOCKED)
    assert engine.snapshot().status == "dead"


def test_oxygen_odds_rise_with_score():
    bus, world, engine = new_game(seed=5)
    early = sum(engine.random_atom() is Cell.OXYGEN for _ in range(4000)) / 4000
    world.component_for_entity(engine.entity, Score).value = 4
    late = sum(engine.random_atom() is Cell.OXYGEN for _ in range(4000)) / 4000
    assert 0.11 < early < 0.19
    assert 0.21 < late < 0.29


def test_target_change_and_match_events_carry_target_name():
    bus, world, engine = new_game()
    targets = record(bus, EVENT_TARGET_CHANGED)
    found = record(bus, EVENT_MATCH_FOUND)
    engine.start()
    assert targets and targets[-1]['target_name'] == "ethane"
    assert targets[-1]['pattern'] == "CC"
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    assert found[0]['target_name'] == "ethane"


def test_speed_boost_never_raises_a_fast_base_tick():
    bus, world, engine = new_game(tick_ms=50)
    assert engine.boost_speed(1) is False
    assert engine.speed.current_ms == 50
    engine.start()
    drop_carbon_at(engine, 5)
    drop_carbon_at(engine, 6)
    assert engine.score == 1
    assert engine.speed.current_ms <= engine.speed.base_ms


def test_garbage_refused_when_clamped_atom_would_overlap():
    bus, world, engine = new_game((UNMATCHABLE,))
    engine.start()
    assert (engine.active.x, engine.active.y) == (5, 0)
    place(engine.board, {(5, 1): Cell.CARBON})
    before = engine.board.row_strings()
    assert engine.add_garbage_rows(1) is False
    assert engine.board.row_strings() == before
    assert engine.active.y == 0
    engine.queue_garbage(1)
    over = engine.apply_pending_garbage()
    assert over is not None and over.cause is GameOverCause.GARBAGE_OVERFLOW
