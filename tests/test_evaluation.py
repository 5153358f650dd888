"""
Unit Tests for Heuristic Evaluation

Tests for the fallback evaluator, focusing on:
    - Pip and blot counting
    - Determinism (same position = same analysis)
    - Range guarantees (bounded evaluation, ordered percentages)
    - Analysis types and their serialization
"""

import pytest

from backgammon_engine.board import BoardPosition, Color, ColorCounts, points_from_counts, starting_position
from backgammon_engine.data.sampler import PositionSampler
from backgammon_engine.evaluation import (
    HeuristicConfig,
    HeuristicEvaluator,
    Move,
    PositionAnalysis,
    WinningChances,
    blot_count,
    pip_count,
)


@pytest.fixture
def evaluator():
    """Create a HeuristicEvaluator with default coefficients."""
    return HeuristicEvaluator()


def race(white_point, red_point):
    """All 15 checkers of each side stacked on one point."""
    return BoardPosition(
        points=points_from_counts({white_point: (Color.WHITE, 15), red_point: (Color.RED, 15)})
    )


class TestCounting:
    """Tests for pip_count() and blot_count()."""

    def test_starting_pip_count(self):
        """Both sides need 167 pips in the opening position."""
        start = starting_position()

        assert pip_count(start, Color.WHITE) == 167
        assert pip_count(start, Color.RED) == 167

    def test_bar_counts_full_distance(self):
        position = BoardPosition(bar=ColorCounts(white=1, red=2))

        assert pip_count(position, Color.WHITE) == 25
        assert pip_count(position, Color.RED) == 50

    def test_borne_off_counts_nothing(self):
        position = BoardPosition(bear_off=ColorCounts(white=15, red=15))
        assert pip_count(position, Color.WHITE) == 0

    def test_blots(self):
        position = BoardPosition(
            points=points_from_counts({
                3: (Color.WHITE, 1),
                4: (Color.WHITE, 2),
                9: (Color.WHITE, 1),
                10: (Color.RED, 1),
            })
        )

        assert blot_count(position, Color.WHITE) == 2
        assert blot_count(position, Color.RED) == 1


class TestHeuristicEvaluator:
    """Tests for HeuristicEvaluator."""

    def test_starting_position_is_even(self, evaluator):
        """Symmetric opening position evaluates to exactly 0."""
        analysis = evaluator.evaluate(starting_position())

        assert analysis.evaluation == 0.0
        assert analysis.winning_chances == WinningChances(win=50.0, gammon=10.0, backgammon=2.0)
        assert analysis.moves == ()
        assert analysis.confidence == 0.5

    def test_position_id_is_carried(self, evaluator):
        start = starting_position()
        assert evaluator.evaluate(start).position_id == start.id

    def test_deterministic(self, evaluator):
        """Two calls on the same position give equal analyses."""
        start = starting_position()
        assert evaluator.evaluate(start) == evaluator.evaluate(start)

    def test_race_lead_favours_white(self, evaluator):
        """White almost home against red far back: positive evaluation."""
        analysis = evaluator.evaluate(race(white_point=23, red_point=20))

        # pips: white 15 * 2 = 30, red 15 * 20 = 300 -> (300 - 30) / 30 = 9, clamped to 3
        assert analysis.evaluation == 3.0
        assert analysis.winning_chances.win == 95.0

    def test_race_deficit_favours_red(self, evaluator):
        analysis = evaluator.evaluate(race(white_point=2, red_point=1))

        assert analysis.evaluation == -3.0
        assert analysis.winning_chances.win == 5.0
        assert analysis.winning_chances.backgammon == 0.0

    def test_material_term(self, evaluator):
        """A borne-off checker is worth material_weight on top of the pip gain."""
        base = race(white_point=12, red_point=13)
        ahead = base.with_changes(
            points=points_from_counts({12: (Color.WHITE, 14), 13: (Color.RED, 15)}),
            bear_off=ColorCounts(white=1),
        )

        diff = evaluator.raw_score(ahead) - evaluator.raw_score(base)

        assert diff == pytest.approx(13 / 30 + 0.3)

    def test_evaluation_bounded_on_samples(self, evaluator):
        """Evaluation stays in [-3, 3] and percentages stay ordered."""
        for position in PositionSampler(seed=7).sample_many(200):
            analysis = evaluator.evaluate(position)
            chances = analysis.winning_chances

            assert -3.0 <= analysis.evaluation <= 3.0
            assert 0.0 <= chances.backgammon <= chances.gammon <= chances.win <= 100.0

    @pytest.mark.parametrize("evaluation", [-3.0, -2.5, -1.0, 0.0, 0.3, 1.7, 3.0])
    def test_chances_ordered_across_range(self, evaluator, evaluation):
        chances = evaluator.winning_chances(evaluation)
        assert 0.0 <= chances.backgammon <= chances.gammon <= chances.win <= 100.0

    def test_ordering_enforced_for_tuned_coefficients(self):
        """Coefficients that would invert the ordering are clamped."""
        evaluator = HeuristicEvaluator(HeuristicConfig(win_intercept=5.0, gammon_intercept=40.0))
        chances = evaluator.winning_chances(0.0)

        assert chances.gammon == chances.win == 5.0
        assert chances.backgammon == 2.0


class TestHeuristicConfig:
    """Tests for HeuristicConfig validation."""

    def test_defaults(self):
        config = HeuristicConfig()
        assert config.pip_divisor == 30.0
        assert config.evaluation_bound == 3.0

    def test_invalid_pip_divisor(self):
        with pytest.raises(ValueError, match="pip_divisor"):
            HeuristicConfig(pip_divisor=0)

    def test_invalid_bound(self):
        with pytest.raises(ValueError, match="evaluation_bound"):
            HeuristicConfig(evaluation_bound=-1.0)


class TestAnalysisTypes:
    """Tests for WinningChances and PositionAnalysis."""

    def test_chances_out_of_range(self):
        with pytest.raises(ValueError, match="win"):
            WinningChances(win=101.0, gammon=0.0, backgammon=0.0)

    def test_chances_out_of_order(self):
        with pytest.raises(ValueError, match="win >= gammon >= backgammon"):
            WinningChances(win=10.0, gammon=20.0, backgammon=0.0)

    def test_confidence_range(self):
        with pytest.raises(ValueError, match="confidence"):
            PositionAnalysis(
                position_id="x",
                winning_chances=WinningChances(50.0, 10.0, 2.0),
                evaluation=0.0,
                confidence=1.5,
            )

    def test_best_move(self):
        move = Move(notation="24/18 13/11", source=24, destination=18, evaluation=0.1, win_rate=52.0)
        analysis = PositionAnalysis(
            position_id="x",
            winning_chances=WinningChances(52.0, 12.0, 1.0),
            evaluation=0.1,
            moves=[move],
        )

        assert analysis.moves == (move,)
        assert analysis.best_move == move

    def test_dict_round_trip(self):
        analysis = PositionAnalysis(
            position_id="abc",
            winning_chances=WinningChances(60.0, 15.0, 3.0),
            evaluation=0.7,
            moves=(Move("8/5 6/5", 8, 5, 0.7, 60.0),),
            confidence=0.8,
        )

        data = analysis.to_dict()

        assert data["bestMoves"][0]["from"] == 8
        assert PositionAnalysis.from_dict(data) == analysis
