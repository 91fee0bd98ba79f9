"""Tests for judge."""
import pytest

import judge
from beat_scheduler import BeatScheduler
from judge import JudgeEngine, ScoreState
from pattern_models import BeatEvent, Category, GridCell, JudgmentKind, JudgmentResult


@pytest.fixture
def low_session(rng):
    scheduler = BeatScheduler(rng)
    engine = JudgeEngine(scheduler)
    scheduler.start((BeatEvent(time=0.0, category=Category.LOW),), now_ms=1000.0)
    cell = scheduler.tick(1000.0).cell
    return scheduler, engine, cell


class TestScenarios:
    def test_immediate_strike_is_hit(self, low_session):
        scheduler, engine, cell = low_session
        assert cell.row == 2
        result = engine.judge(cell.row, cell.col, 1000.0)
        assert result.kind is JudgmentKind.HIT
        assert result.score_delta == 10
        assert engine.score_state().score == 10
        assert scheduler.live_cell() is None

    def test_strike_after_window_is_too_late(self, low_session):
        scheduler, engine, cell = low_session
        result = engine.judge(cell.row, cell.col, 1600.0)
        assert result.kind is JudgmentKind.TOO_LATE
        assert result.score_delta == 0
        assert engine.score_state().score == 0
        assert scheduler.live_cell() is not None
        assert scheduler.live_cell().cell == cell

    def test_never_activated_cell_is_miss(self, low_session):
        _scheduler, engine, cell = low_session
        other = GridCell(row=0, col=cell.col)
        for now_ms in (1000.0, 1200.0, 9000.0):
            assert engine.judge(other.row, other.col, now_ms).kind is JudgmentKind.MISS

    def test_strike_in_gap_after_retirement_is_miss(self, rng, two_beat_sequence):
        scheduler = BeatScheduler(rng)
        engine = JudgeEngine(scheduler)
        scheduler.start(two_beat_sequence, now_ms=0.0)
        cell = scheduler.tick(0.0).cell
        scheduler.tick(500.0)
        assert engine.judge(cell.row, cell.col, 510.0).kind is JudgmentKind.MISS


class TestWindow:
    def test_window_boundary_inclusive(self, low_session):
        _scheduler, engine, cell = low_session
        assert engine.judge(cell.row, cell.col, 1500.0).kind is JudgmentKind.HIT

    def test_just_past_window(self, low_session):
        _scheduler, engine, cell = low_session
        assert engine.judge(cell.row, cell.col, 1500.001).kind is JudgmentKind.TOO_LATE

    def test_custom_window_and_score(self, rng):
        scheduler = BeatScheduler(rng)
        engine = JudgeEngine(scheduler, activation_window_ms=50, hit_score=3)
        scheduler.start((BeatEvent(time=0.0, category=Category.HIGH),), now_ms=0.0)
        cell = scheduler.tick(0.0).cell
        assert engine.judge(cell.row, cell.col, 60.0).kind is JudgmentKind.TOO_LATE
        result = engine.judge(cell.row, cell.col, 40.0)
        assert result.kind is JudgmentKind.HIT
        assert result.score_delta == 3
        assert engine.activation_window_ms() == 50.0

    def test_negative_window_rejected(self, rng):
        with pytest.raises(ValueError):
            JudgeEngine(BeatScheduler(rng), activation_window_ms=-1)


class TestExclusivityAndInputs:
    def test_second_strike_same_activation_not_hit(self, low_session):
        _scheduler, engine, cell = low_session
        first = engine.judge(cell.row, cell.col, 1000.0)
        second = engine.judge(cell.row, cell.col, 1001.0)
        assert first.kind is JudgmentKind.HIT
        assert second.kind is JudgmentKind.MISS
        assert engine.score_state().score == 10

    def test_too_late_then_hit_impossible(self, low_session):
        _scheduler, engine, cell = low_session
        assert engine.judge(cell.row, cell.col, 1700.0).kind is JudgmentKind.TOO_LATE
        assert engine.judge(cell.row, cell.col, 1800.0).kind is JudgmentKind.TOO_LATE

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, 3), (3, 3), (100, -100)])
    def test_off_grid_strike_is_miss(self, low_session, row, col):
        _scheduler, engine, _cell = low_session
        result = engine.judge(row, col, 1000.0)
        assert result.kind is JudgmentKind.MISS
        assert result.cell == GridCell(row=row, col=col)

    @pytest.mark.parametrize("row_offset,col_offset", [(0.9, 0.5), (0.5, 0.0), (0.0, 0.999), (-0.1, 0.0)])
    def test_fractional_strike_is_miss(self, low_session, row_offset, col_offset):
        scheduler, engine, cell = low_session
        result = engine.judge(cell.row + row_offset, cell.col + col_offset, 1000.0)
        assert result.kind is JudgmentKind.MISS
        assert result.score_delta == 0
        assert engine.score_state().score == 0
        assert scheduler.live_cell() is not None
        assert scheduler.live_cell().cell == cell

    def test_whole_float_strike_hits_live_cell(self, low_session):
        scheduler, engine, cell = low_session
        result = engine.judge(float(cell.row), float(cell.col), 1000.0)
        assert result.kind is JudgmentKind.HIT
        assert result.cell == cell
        assert isinstance(result.cell.row, int)
        assert scheduler.live_cell() is None

    @pytest.mark.parametrize("row,col", [(float("nan"), 0), (2, float("inf")), ("2", "0"), (None, 1)])
    def test_non_numeric_strike_is_miss(self, low_session, row, col):
        _scheduler, engine, _cell = low_session
        assert engine.judge(row, col, 1000.0).kind is JudgmentKind.MISS

    def test_strike_before_start_is_miss(self, rng):
        engine = JudgeEngine(BeatScheduler(rng))
        assert engine.judge(1, 1, 0.0).kind is JudgmentKind.MISS

    def test_judge_does_not_move_cursor(self, low_session):
        scheduler, engine, cell = low_session
        index = scheduler.next_index()
        engine.judge(cell.row, cell.col, 1000.0)
        engine.judge(0, 0, 1000.0)
        assert scheduler.next_index() == index


class TestScoreState:
    def test_counts_by_kind(self, low_session):
        _scheduler, engine, cell = low_session
        engine.judge(0, 0, 1000.0)
        engine.judge(cell.row, cell.col, 1600.0)
        engine.judge(cell.row, cell.col, 1100.0)
        state = engine.score_state()
        assert (state.score, state.hit_count, state.miss_count, state.too_late_count) == (10, 1, 1, 1)
        assert [result.kind for result in engine.recent_judgements()] == [
            JudgmentKind.MISS,
            JudgmentKind.TOO_LATE,
            JudgmentKind.HIT,
        ]

    def test_reset_and_clear(self, low_session):
        _scheduler, engine, cell = low_session
        engine.judge(cell.row, cell.col, 1000.0)
        engine.clear_recent_judgements()
        assert engine.recent_judgements() == []
        assert engine.score_state().score == 10
        engine.reset()
        assert engine.score_state() == ScoreState()

    def test_apply_only_scores_hits(self):
        state = ScoreState()
        cell = GridCell(row=0, col=0)
        state.apply(JudgmentResult(kind=JudgmentKind.TOO_LATE, score_delta=0, cell=cell, time_ms=0.0))
        state.apply(JudgmentResult(kind=JudgmentKind.HIT, score_delta=10, cell=cell, time_ms=0.0))
        assert state.score == 10

    def test_inline_unit_tests(self):
        judge._run_unit_tests()
