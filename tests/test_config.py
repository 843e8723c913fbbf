import pytest
from pydantic import ValidationError

from ratmaze import Direction, SolverConfig
from ratmaze.pool import default_pool_size


@pytest.mark.unit
class TestSolverConfig:

    def test_defaults(self):
        config = SolverConfig()
        assert config.pool_size == default_pool_size()
        assert config.visit_delay == pytest.approx(0.1)
        assert config.order == (Direction.Down, Direction.Right)
        assert config.report_backtrack is False
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("order", ["right,down", ["right", "down"], (Direction.Right, Direction.Down)])
    def test_order_forms(self, order):
        assert SolverConfig(order=order).order == (Direction.Right, Direction.Down)

    @pytest.mark.parametrize("order", ["down", "down,down", "down,left", ""])
    def test_bad_order(self, order):
        with pytest.raises(ValidationError):
            SolverConfig(order=order)

    @pytest.mark.parametrize("field,value", [("pool_size", 0), ("visit_delay", -0.5), ("log_level", "LOUD")])
    def test_bad_values(self, field, value):
        with pytest.raises(ValidationError):
            SolverConfig(**{field: value})

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RATMAZE_POOL_SIZE", "3")
        monkeypatch.setenv("RATMAZE_VISIT_DELAY", "0")
        monkeypatch.setenv("RATMAZE_ORDER", "right,down")
        monkeypatch.setenv("RATMAZE_REPORT_BACKTRACK", "true")
        monkeypatch.setenv("RATMAZE_LOG_LEVEL", "debug")
        config = SolverConfig.from_env()
        assert config.pool_size == 3
        assert config.visit_delay == 0.0
        assert config.order == (Direction.Right, Direction.Down)
        assert config.report_backtrack is True
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self):
        assert SolverConfig.from_env() == SolverConfig(pool_size=default_pool_size())
