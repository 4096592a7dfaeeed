"""
Run Simulation Script.

Usage:
    python scripts/run_simulation.py run.num_ticks=5000 run.seed=7
    python scripts/run_simulation.py run.tick_interval_ms=50
"""

import logging
import os
from contextlib import ExitStack
from pathlib import Path

import hydra
from omegaconf import DictConfig

from lobsim.config import SimulationConfig
from lobsim.event_logger import EventLogger
from lobsim.market import Simulation
from lobsim.runner import TickRunner
from lobsim.snapshot import MarketSnapshot


def log_snapshot(snapshot: MarketSnapshot) -> None:
    logging.info(
        f"Tick {snapshot.tick}: price {snapshot.current_price:.2f}, "
        f"bids {len(snapshot.active_bids)}, asks {len(snapshot.active_asks)}, "
        f"filled {len(snapshot.completed_orders)}"
    )


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    # Configure logging
    log_level = getattr(logging, cfg.run.log_level.upper())
    logging.getLogger().setLevel(log_level)
    logging.getLogger("lobsim").setLevel(log_level)

    if not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        logging.getLogger().addHandler(handler)

    logging.info(f"Running simulation: {cfg.run.name}")
    sim_config = SimulationConfig.from_config(cfg.simulation)

    with ExitStack() as stack:
        event_logger = None
        if cfg.run.get("log_events", False):
            event_log_path = Path(cfg.run.log_dir) / f"{cfg.run.name}_events.jsonl"
            event_logger = stack.enter_context(EventLogger(event_log_path))
            logging.info(f"Event logging enabled: {event_log_path}")

        sim = Simulation(config=sim_config, seed=cfg.run.seed, event_logger=event_logger)

        if cfg.run.tick_interval_ms:
            runner = TickRunner(
                sim,
                cfg.run.tick_interval_ms,
                on_snapshot=log_snapshot,
                publish_interval_ms=cfg.run.ui_update_interval_ms,
            )
            runner.run(cfg.run.num_ticks)
        else:
            sim.run(cfg.run.num_ticks)

    snapshot = sim.snapshot()

    # Save results
    output_dir = cfg.run.output_dir
    os.makedirs(output_dir, exist_ok=True)
    snapshot.price_frame().to_csv(os.path.join(output_dir, "price_history.csv"), index=False)
    snapshot.completed_frame().to_csv(os.path.join(output_dir, "completed_orders.csv"), index=False)

    logging.info(f"Results saved to {output_dir}")
    log_snapshot(snapshot)
    print(snapshot.price_frame()["price"].describe())


if __name__ == "__main__":
    main()
