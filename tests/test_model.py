"""Tests for BackgammonNet and the neural native evaluator."""

import time
from concurrent.futures import ThreadPoolExecutor

import pytest

import torch
import torch.nn as nn

from backgammon_engine.board import encode_for_engine, starting_position
from backgammon_engine.errors import EvaluatorUnavailable
from backgammon_engine.evaluation import EvaluationEngine
from backgammon_engine.evaluation.neural import NeuralEvaluator
from backgammon_engine.training.model import BackgammonNet, ResidualBlock, create_model


class TestResidualBlock:
    """Test ResidualBlock class."""

    def test_initialization(self):
        """Test block initialization."""
        block = ResidualBlock(channels=32)

        assert isinstance(block.conv1, nn.Conv1d)
        assert isinstance(block.conv2, nn.Conv1d)
        assert isinstance(block.bn1, nn.BatchNorm1d)
        assert isinstance(block.bn2, nn.BatchNorm1d)

    def test_forward_shape(self):
        """Test forward pass preserves shape."""
        block = ResidualBlock(channels=32)
        x = torch.randn(4, 32, 24)

        assert block(x).shape == (4, 32, 24)

    def test_gradient_flow(self):
        """Test gradients flow through skip connection."""
        block = ResidualBlock(channels=32)
        x = torch.randn(2, 32, 24, requires_grad=True)

        block(x).sum().backward()

        assert x.grad is not None
        assert x.grad.shape == x.shape


class TestBackgammonNet:
    """Test BackgammonNet model."""

    def test_initialization_default(self):
        model = BackgammonNet()

        assert model.blocks == 3
        assert model.channels == 64

    def test_invalid_blocks_raises_error(self):
        with pytest.raises(ValueError, match="blocks must be"):
            BackgammonNet(blocks=4)

    def test_invalid_channels_raises_error(self):
        with pytest.raises(ValueError, match="channels must be"):
            BackgammonNet(channels=48)

    def test_forward_shape_and_range(self):
        """Outputs are three probabilities per position."""
        model = BackgammonNet(blocks=1, channels=32)
        output = model(torch.rand(2, 4, 24), torch.rand(2, 5))

        assert output.shape == (2, 3)
        assert torch.all(output >= 0) and torch.all(output <= 1)

    def test_count_parameters(self):
        small = create_model("small")
        large = create_model("large")

        assert 0 < small.count_parameters() < large.count_parameters()

    def test_create_model_invalid(self):
        with pytest.raises(ValueError, match="config_name"):
            create_model("huge")

    def test_save_and_load(self, tmp_path):
        """Checkpoint round trip keeps architecture and weights."""
        model = BackgammonNet(blocks=2, channels=32)
        path = tmp_path / "net.pt"
        model.save(path)

        loaded = BackgammonNet.load(path)

        assert loaded.blocks == 2
        assert loaded.channels == 32
        for name, tensor in model.state_dict().items():
            assert torch.equal(tensor, loaded.state_dict()[name])

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BackgammonNet.load(tmp_path / "missing.pt")

    def test_repr(self):
        assert "blocks=1" in repr(BackgammonNet(blocks=1, channels=32))


class TestNeuralEvaluator:
    """Test NeuralEvaluator behind the native-evaluator interface."""

    @pytest.fixture
    def model(self):
        torch.manual_seed(0)
        return BackgammonNet(blocks=1, channels=32)

    def test_evaluate_before_init_raises(self, model):
        evaluator = NeuralEvaluator(model=model)

        with pytest.raises(EvaluatorUnavailable):
            evaluator.evaluate(encode_for_engine(starting_position()))

    def test_init_without_model(self):
        assert NeuralEvaluator().init() is False

    def test_init_missing_checkpoint(self, tmp_path):
        """A missing checkpoint is reported as unavailable, not raised."""
        assert NeuralEvaluator().init(str(tmp_path / "missing.pt")) is False

    def test_evaluate(self, model):
        """Analysis is well-formed and carries the display id."""
        start = starting_position()
        evaluator = NeuralEvaluator(model=model)
        assert evaluator.init() is True

        analysis = evaluator.evaluate(encode_for_engine(start))
        chances = analysis.winning_chances

        assert analysis.position_id == start.id
        assert 0.0 <= chances.backgammon <= chances.gammon <= chances.win <= 100.0
        assert -3.0 <= analysis.evaluation <= 3.0
        assert 0.5 <= analysis.confidence <= 1.0
        assert analysis.moves == ()

    def test_deterministic(self, model):
        evaluator = NeuralEvaluator(model=model)
        evaluator.init()
        encoded = encode_for_engine(starting_position())

        assert evaluator.evaluate(encoded) == evaluator.evaluate(encoded)

    def test_malformed_encoding(self, model):
        evaluator = NeuralEvaluator(model=model)
        evaluator.init()

        with pytest.raises(ValueError):
            evaluator.evaluate("not an encoding")

    def test_engine_with_checkpoint(self, model, tmp_path):
        """The engine loads a checkpoint through init() and uses it."""
        path = tmp_path / "net.pt"
        model.save(path)
        engine = EvaluationEngine(native=NeuralEvaluator(), model_reference=str(path))

        assert engine.probe() is True
        analysis = engine.evaluate(starting_position())
        assert analysis.moves == ()
        assert analysis.confidence >= 0.5

    def test_concurrent_init_loads_once(self, model, monkeypatch):
        """Threads racing on init() share one checkpoint load."""
        loads = []

        def slow_load(path, device="cpu"):
            loads.append(path)
            time.sleep(0.2)
            return model

        monkeypatch.setattr(BackgammonNet, "load", staticmethod(slow_load))
        evaluator = NeuralEvaluator()

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: evaluator.init("net.pt"), range(4)))

        assert results == [True] * 4
        assert loads == ["net.pt"]
