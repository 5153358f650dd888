"""
Evaluation Module

This module provides position evaluation for the engine. Evaluators are
SWAPPABLE: the EvaluationEngine works with any NativeEvaluator and always
keeps the HeuristicEvaluator as a fallback.

Key Components:
    - Evaluator (ABC): Evaluates a BoardPosition
    - NativeEvaluator (ABC): init()/evaluate(encoded) capability for injected engines
    - HeuristicEvaluator: Pip count + blots + material, deterministic
    - NeuralEvaluator: BackgammonNet behind the NativeEvaluator interface
    - EvaluationEngine: Native-first, heuristic fallback

Data Flow:
    BoardPosition → engine.evaluate() → PositionAnalysis
                                        Positive evaluation = White advantage
                                        Negative evaluation = Red advantage
"""

from backgammon_engine.evaluation.base import (
    Evaluator,
    Move,
    NativeEvaluator,
    PositionAnalysis,
    WinningChances,
)
from backgammon_engine.evaluation.engine import EvaluationEngine, get_default_engine
from backgammon_engine.evaluation.heuristic import (
    HeuristicConfig,
    HeuristicEvaluator,
    blot_count,
    pip_count,
)

__all__ = [
    'Evaluator',
    'Move',
    'NativeEvaluator',
    'PositionAnalysis',
    'WinningChances',
    'EvaluationEngine',
    'get_default_engine',
    'HeuristicConfig',
    'HeuristicEvaluator',
    'blot_count',
    'pip_count',
]
