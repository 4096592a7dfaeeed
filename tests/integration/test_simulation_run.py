# tests/integration/test_simulation_run.py
"""
Integration tests for a full simulation run.

These tests drive the whole stack (generator, news, mean reversion, book,
matching, event log and the command-line entry point) over long runs.
"""

import importlib.util
from pathlib import Path

import pandas as pd
from omegaconf import OmegaConf

from lobsim.event_logger import load_events
from lobsim.market import Simulation

ROOT = Path(__file__).parents[2]


def load_script():
    spec = importlib.util.spec_from_file_location(
        "run_simulation", ROOT / "scripts" / "run_simulation.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# =============================================================================
# Test: Long run
# =============================================================================


class TestLongRun:
    """Invariants over thousands of ticks."""

    def test_long_run_stays_consistent(self, sim):
        history = sim.run(3000)

        assert len(history) == 3001
        assert (history["price"] > 0).all()
        assert len(sim.book) <= 100
        assert len(sim.reversion) == 1000
        assert len(sim.book.completed) > 0

        snap = sim.snapshot()
        assert snap.tick == 3000
        assert abs(snap.running_average - sum(sim.reversion.window) / 1000) < 1e-6

    def test_every_filled_order_was_placed_earlier(self, sim):
        sim.run(1000)
        for done in sim.book.completed:
            assert 1 <= done.tick_placed <= done.tick_taken <= 1000
            assert done.quantity == 0

    def test_news_shocks_occur_over_long_runs(self):
        sim = Simulation(seed=3)
        starts = 0
        previous = None
        for _ in range(5000):
            bias = sim.step().news_bias
            if bias is not None and bias is not previous:
                starts += 1
            previous = bias
        assert starts >= 1


# =============================================================================
# Test: Command-line entry point
# =============================================================================


class TestRunScript:
    """scripts/run_simulation.py with the shipped config."""

    def make_cfg(self, tmp_path, **run_overrides):
        cfg = OmegaConf.load(ROOT / "conf" / "config.yaml")
        cfg.run.name = "it"
        cfg.run.num_ticks = 120
        cfg.run.output_dir = str(tmp_path / "out")
        cfg.run.log_dir = str(tmp_path / "logs")
        cfg.run.log_level = "WARNING"
        for key, value in run_overrides.items():
            cfg.run[key] = value
        return cfg

    def test_writes_results(self, tmp_path):
        script = load_script()
        cfg = self.make_cfg(tmp_path, log_events=True)

        script.main(cfg)

        prices = pd.read_csv(tmp_path / "out" / "price_history.csv")
        assert list(prices.columns) == ["tick", "price"]
        assert len(prices) == 121

        completed = pd.read_csv(tmp_path / "out" / "completed_orders.csv")
        assert "tick_taken" in completed.columns

        events = load_events(tmp_path / "logs" / "it_events.jsonl")
        assert any(e["event_type"] == "order_placed" for e in events)

    def test_output_matches_direct_run(self, tmp_path):
        script = load_script()
        cfg = self.make_cfg(tmp_path)

        script.main(cfg)

        expected = Simulation(seed=cfg.run.seed).run(120)
        written = pd.read_csv(tmp_path / "out" / "price_history.csv")
        pd.testing.assert_frame_equal(written, expected, check_dtype=False)

    def test_paced_run(self, tmp_path):
        script = load_script()
        cfg = self.make_cfg(tmp_path, tick_interval_ms=10, num_ticks=5)

        script.main(cfg)

        prices = pd.read_csv(tmp_path / "out" / "price_history.csv")
        assert prices["tick"].tolist() == list(range(6))
