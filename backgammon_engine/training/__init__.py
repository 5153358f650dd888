"""
Training module: neural network architecture for the learned evaluator.
"""

from backgammon_engine.training.model import BackgammonNet, ResidualBlock, create_model

__all__ = ["BackgammonNet", "ResidualBlock", "create_model"]
