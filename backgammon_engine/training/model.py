"""
Residual network for backgammon position evaluation.

Components:
    - Conv1d: Slides filters along the 24 points to detect local structures
      (primes, blocked points, blots next to enemy stacks). Uses kernel size 3.

    - BatchNorm1d (BN): Normalizes activations for stable, faster training.

    - Skip Connection: Residual path (x + f(x)) so gradients flow directly
      through the tower.

    - Sigmoid: Bounds each output to [0, 1], read as probabilities of
      White winning, winning a gammon and winning a backgammon.

Input:
    planes  (N, 4, 24)  per-point features (see board.representation)
    globals (N, 5)      bar, borne-off and side-to-move features
"""

from pathlib import Path
from typing import Union

import torch
import torch.nn as nn
import torch.nn.functional as F

from backgammon_engine.board.representation import NUM_GLOBALS, NUM_PLANES

NUM_POINTS = 24
NUM_OUTPUTS = 3  # win, gammon, backgammon


class ResidualBlock(nn.Module):
    """Residual block with two 1D convolutions and a skip connection.

    Architecture:
        x -> Conv -> BN -> ReLU -> Conv -> BN -> (+x) -> ReLU
    """

    def __init__(self, channels: int):
        """Initialize residual block.

        Args:
            channels: Number of input/output channels
        """
        super().__init__()

        self.conv1 = nn.Conv1d(channels, channels, kernel_size=3, padding=1, bias=False)
        self.bn1 = nn.BatchNorm1d(channels)
        self.conv2 = nn.Conv1d(channels, channels, kernel_size=3, padding=1, bias=False)
        self.bn2 = nn.BatchNorm1d(channels)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Forward pass with residual connection.

        Args:
            x: Input tensor (N, channels, 24)

        Returns:
            Output tensor (N, channels, 24)
        """
        residual = x

        x = F.relu(self.bn1(self.conv1(x)))
        x = self.bn2(self.conv2(x))

        x = x + residual
        return F.relu(x)


class BackgammonNet(nn.Module):
    """ResNet-style backgammon position evaluator.

    Architecture:
        1. Input conv: 4 point planes -> channels
        2. N residual blocks
        3. Value head:
           - 1x1 conv: channels -> 16
           - Flatten, concatenate the 5 global features
           - Dense 128 -> Dense 3 -> Sigmoid
    """

    def __init__(self, blocks: int = 3, channels: int = 64):
        """Initialize BackgammonNet.

        Args:
            blocks: Number of residual blocks (1, 2, 3, 5 or 8)
            channels: Number of filters per conv layer (32, 64 or 128)

        Raises:
            ValueError: If blocks or channels not in allowed values
        """
        super().__init__()

        if blocks not in [1, 2, 3, 5, 8]:
            raise ValueError(f"blocks must be 1, 2, 3, 5, or 8, got {blocks}")

        if channels not in [32, 64, 128]:
            raise ValueError(f"channels must be 32, 64, or 128, got {channels}")

        self.blocks = blocks
        self.channels = channels

        self.input_conv = nn.Conv1d(NUM_PLANES, channels, kernel_size=3, padding=1, bias=False)
        self.input_bn = nn.BatchNorm1d(channels)

        self.res_blocks = nn.ModuleList([ResidualBlock(channels) for _ in range(blocks)])

        self.value_conv = nn.Conv1d(channels, 16, kernel_size=1, bias=False)
        self.value_bn = nn.BatchNorm1d(16)
        self.value_fc1 = nn.Linear(16 * NUM_POINTS + NUM_GLOBALS, 128)
        self.value_fc2 = nn.Linear(128, NUM_OUTPUTS)

    def forward(self, planes: torch.Tensor, globals_: torch.Tensor) -> torch.Tensor:
        """Forward pass through network.

        Args:
            planes: Point features (N, 4, 24)
            globals_: Global features (N, 5)

        Returns:
            Probabilities (N, 3) for win, gammon, backgammon (White's side)
        """
        x = F.relu(self.input_bn(self.input_conv(planes)))

        for block in self.res_blocks:
            x = block(x)

        x = F.relu(self.value_bn(self.value_conv(x)))
        x = x.view(x.size(0), -1)  # (N, 16, 24) -> (N, 384)
        x = torch.cat([x, globals_], dim=1)
        x = F.relu(self.value_fc1(x))
        return torch.sigmoid(self.value_fc2(x))

    def count_parameters(self) -> int:
        """Count trainable parameters in model."""
        return sum(p.numel() for p in self.parameters() if p.requires_grad)

    def save(self, path: Union[str, Path]) -> None:
        """Save architecture and weights to a checkpoint file."""
        torch.save(
            {
                "blocks": self.blocks,
                "channels": self.channels,
                "model_state_dict": self.state_dict(),
            },
            str(path),
        )

    @classmethod
    def load(cls, path: Union[str, Path], device: str = "cpu") -> "BackgammonNet":
        """Load a checkpoint written by save().

        Raises:
            FileNotFoundError: If the checkpoint does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Checkpoint not found: {path}")

        checkpoint = torch.load(str(path), map_location=device)
        model = cls(blocks=checkpoint["blocks"], channels=checkpoint["channels"])
        model.load_state_dict(checkpoint["model_state_dict"])
        return model.to(device)

    def __repr__(self) -> str:
        """String representation of model."""
        params = self.count_parameters()
        return (
            f"BackgammonNet(\n"
            f"  blocks={self.blocks},\n"
            f"  channels={self.channels},\n"
            f"  parameters={params:,}\n"
            f")"
        )


def create_model(config_name: str = "small") -> BackgammonNet:
    """Factory function to create model from preset configurations.

    Args:
        config_name: One of "small", "medium", "large"

    Returns:
        Configured BackgammonNet model

    Raises:
        ValueError: If config_name not recognized
    """
    configs = {
        "small": {"blocks": 2, "channels": 32},
        "medium": {"blocks": 3, "channels": 64},
        "large": {"blocks": 8, "channels": 128},
    }

    if config_name not in configs:
        raise ValueError(
            f"config_name must be 'small', 'medium', or 'large', got '{config_name}'"
        )

    return BackgammonNet(**configs[config_name])
