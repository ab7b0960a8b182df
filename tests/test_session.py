from __future__ import annotations

import threading

import numpy as np
import pytest

from blockdrop.clock import ManualScheduler
from blockdrop.piece_source import RandomPieceSource, SequencePieceSource
from blockdrop.pieces import PieceType, orientations
from blockdrop.session import GameSession, GameStatus, TickResult


def _session(*types: PieceType, cycle: bool = True) -> tuple[GameSession, ManualScheduler]:
    scheduler = ManualScheduler()
    source = SequencePieceSource(types or (PieceType.SQUARE, PieceType.LINE, PieceType.T), cycle=cycle)
    return GameSession(scheduler, source), scheduler


def _drop(session: GameSession) -> TickResult:
    result = session.tick()
    while result is TickResult.CONTINUE:
        result = session.tick()
    return result


def test_new_session_starts_playing_at_level_one():
    session, scheduler = _session()
    assert session.status is GameStatus.PLAYING
    assert (session.score, session.level, session.tick_period_ms) == (0, 1, 500)
    assert session.board.occupied_count() == 0
    assert len(scheduler.pending) == 1
    assert scheduler.period_of(scheduler.pending[0]) == 500


def test_first_draw_becomes_active_piece():
    session, _ = _session(PieceType.S, PieceType.Z, PieceType.J)
    snapshot = session.snapshot()
    assert snapshot.active_type is PieceType.S
    assert snapshot.next_type is PieceType.Z


def test_clock_drives_gravity():
    session, scheduler = _session()
    scheduler.advance(1500)
    assert session.active.anchor == (3, 3)


def test_moves_and_rotation_while_playing():
    session, _ = _session(PieceType.T)
    assert session.move_left() is True
    assert session.move_right() is True
    assert session.move_down() is True
    assert session.rotate() is True
    assert session.active.anchor == (3, 1)


def test_pause_blocks_commands_and_gravity():
    session, scheduler = _session()
    assert session.toggle_pause() is True
    assert session.paused
    before = session.active.anchor
    assert session.move_left() is False
    assert session.move_down() is False
    assert session.rotate() is False
    assert session.tick() is TickResult.CONTINUE
    scheduler.advance(2000)
    assert session.active.anchor == before
    # Pausing does not touch the clock registration.
    assert len(scheduler.pending) == 1
    assert session.toggle_pause() is True
    assert session.status is GameStatus.PLAYING
    assert session.move_down() is True


def test_landing_commits_piece_with_type_colour():
    session, _ = _session(PieceType.SQUARE, PieceType.LINE, PieceType.T)
    before = session.board.rows()
    cells = None
    result = session.tick()
    while result is TickResult.CONTINUE:
        cells = session.active.cells()
        result = session.tick()
    assert result is TickResult.LANDED
    assert set(cells) == {(3, 18), (3, 19), (4, 18), (4, 19)}
    after = session.board.rows()
    changed = {(int(x), int(y)) for y, x in zip(*np.nonzero(after != before))}
    assert changed == set(cells)
    assert all(session.board.cell(x, y).color_index == 1 for x, y in cells)
    snapshot = session.snapshot()
    assert snapshot.active_type is PieceType.LINE
    assert snapshot.next_type is PieceType.T


def test_every_spawn_matches_catalog_shape():
    session, _ = _session(*PieceType)
    for _ in range(6):
        _drop(session)
        ax, ay = session.active.anchor
        cells = session.active.cells()
        assert len(set(cells)) == 4
        relative = tuple((x - ax, y - ay) for x, y in cells)
        assert relative in orientations(session.active.piece_type)


def test_vertical_line_completes_bottom_row():
    session, _ = _session(PieceType.LINE, PieceType.SQUARE)
    session.board.grid[19] = 3
    session.board.grid[19, 5] = 0
    assert session.move_right() and session.move_right()
    score_before = session.score
    result = _drop(session)
    assert result is TickResult.LANDED
    assert session.score - score_before == 100 * session.level
    # The three remaining line cells dropped one row.
    assert session.board.occupied_count() == 3
    assert all(session.board.cell(5, y).color_index == 2 for y in (17, 18, 19))


def test_level_up_reschedules_clock():
    session, scheduler = _session(PieceType.LINE, PieceType.SQUARE)
    session.scoring.score = 4950
    session.board.grid[19] = 3
    session.board.grid[19, 3] = 0
    assert _drop(session) is TickResult.LANDED
    assert session.level == 2
    assert session.tick_period_ms == 250
    assert len(scheduler.pending) == 1
    assert scheduler.period_of(scheduler.pending[0]) == 250


def _block_spawn(session: GameSession) -> None:
    # Rows 2..19 filled except column 0: nothing clears and the square lands
    # on row 2 right at the spawn point.
    session.board.grid[2:] = 1
    session.board.grid[2:, 0] = 0


def test_blocked_spawn_ends_game_and_stops_clock():
    session, scheduler = _session(PieceType.SQUARE, PieceType.LINE)
    _block_spawn(session)
    occupied = session.board.occupied_count()
    assert session.tick() is TickResult.GAME_OVER
    assert session.game_over
    # Only the landed square was added; the failed spawn wrote nothing.
    assert session.board.occupied_count() == occupied + 4
    assert scheduler.pending == ()
    assert session.snapshot().game_over


def test_game_over_is_terminal_until_new_game():
    session, scheduler = _session(PieceType.SQUARE, PieceType.LINE)
    _block_spawn(session)
    session.tick()
    board = session.board.rows()
    assert session.tick() is TickResult.GAME_OVER
    assert session.toggle_pause() is False
    assert session.move_left() is False
    assert session.move_right() is False
    assert session.move_down() is False
    assert session.rotate() is False
    assert np.array_equal(session.board.grid, board)

    assert session.new_game() is True
    assert session.status is GameStatus.PLAYING
    assert session.board.occupied_count() == 0
    assert session.score == 0
    assert len(scheduler.pending) == 1


def test_new_game_resets_level_and_period():
    session, scheduler = _session()
    session.scoring.level = 5
    session.scoring.tick_period_ms = 100
    session.scoring.score = 30000
    session.new_game()
    assert (session.score, session.level, session.tick_period_ms) == (0, 1, 500)
    assert scheduler.period_of(scheduler.pending[0]) == 500


def test_score_never_decreases_over_a_game():
    scheduler = ManualScheduler()
    session = GameSession(scheduler, RandomPieceSource(seed=7))
    scores = [session.score]
    for step in range(2000):
        if session.game_over:
            break
        if step % 6 == 0:
            session.move_right()
        elif step % 6 == 3:
            session.move_left()
        scheduler.advance(session.tick_period_ms)
        scores.append(session.score)
    assert session.game_over
    assert scores == sorted(scores)
    assert scheduler.pending == ()


def test_snapshot_is_read_only_copy():
    session, _ = _session()
    snapshot = session.snapshot()
    with pytest.raises(ValueError):
        snapshot.colors[0, 0] = 1
    session.board.grid[19, 0] = 4
    assert snapshot.cell(0, 19).occupied is False
    assert session.snapshot().cell(0, 19).color_index == 4
    assert snapshot.occupied.shape == (20, 10)
    assert snapshot.active_color == (255, 255, 0)


def test_threadsafe_session_serialises_commands():
    scheduler = ManualScheduler()
    session = GameSession(scheduler, RandomPieceSource(seed=3), threadsafe=True)
    errors = []

    def worker(command):
        try:
            for _ in range(200):
                command()
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [
        threading.Thread(target=worker, args=(cmd,))
        for cmd in (session.move_left, session.move_right, session.rotate, session.tick)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    assert session.score >= 0


def test_threadsafe_session_blocks_commands_during_tick():
    scheduler = ManualScheduler()
    session = GameSession(scheduler, SequencePieceSource([PieceType.T], cycle=True), threadsafe=True)
    inside_tick = threading.Event()
    release_tick = threading.Event()
    fall = session.active.attempt_move

    def slow_fall(dx, dy):
        if threading.current_thread().name == "gravity":
            inside_tick.set()
            release_tick.wait(5)
        return fall(dx, dy)

    session.active.attempt_move = slow_fall
    results = []
    ticker = threading.Thread(target=session.tick, name="gravity")
    mover = threading.Thread(target=lambda: results.append(session.move_left()))

    ticker.start()
    assert inside_tick.wait(5)
    mover.start()
    mover.join(0.2)
    # The move waits for the tick to release the session.
    assert mover.is_alive()
    assert results == []

    release_tick.set()
    ticker.join(5)
    mover.join(5)
    assert results == [True]
    assert session.active.anchor == (2, 1)


def test_session_square_soft_drops_to_row_18():
    session, _ = _session(PieceType.SQUARE)
    assert session.move_right() is True
    assert session.active.anchor == (4, 0)
    moves = 0
    while session.move_down():
        moves += 1
    assert moves == 18
    assert session.active.anchor == (4, 18)
    assert session.active.can_move(0, 1) is False
    assert session.board.occupied_count() == 0
