import sys
import os
import time
import argparse

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# --- Path Setup ---
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lattice_planner.config import PlannerConfig
from lattice_planner.map.occupancy_map import OccupancyMap
from lattice_planner.map.base import OCCUPIED
from lattice_planner.vehicles.car import CarModel
from lattice_planner.planning.path_finder import PathFinder
from lattice_planner.planning.request import PlannerType, PlanningRequest
from lattice_planner.visualization.observers import ExperimentObserver
from lattice_planner.visualization.plotter import plot_planning_result
from experiments.benchmark_config import BenchmarkConfig as cfg


def random_block_map(density: float, seed: int) -> OccupancyMap:
    """随机方块障碍 (仅供基准测试)，起终点附近清空"""
    rng = np.random.default_rng(seed)
    data = np.zeros((cfg.MAP_HEIGHT, cfg.MAP_WIDTH), dtype=np.int8)
    target = int(density * data.size)
    while int(np.count_nonzero(data)) < target:
        size = int(rng.integers(1, cfg.MAX_BLOCK + 1))
        ix = int(rng.integers(0, cfg.MAP_WIDTH - size + 1))
        iy = int(rng.integers(0, cfg.MAP_HEIGHT - size + 1))
        data[iy:iy + size, ix:ix + size] = OCCUPIED

    ys, xs = np.mgrid[0:cfg.MAP_HEIGHT, 0:cfg.MAP_WIDTH]
    cx = (xs + 0.5) * cfg.RESOLUTION
    cy = (ys + 0.5) * cfg.RESOLUTION
    for state in (cfg.START_STATE, cfg.GOAL_STATE):
        near = np.hypot(cx - state.x, cy - state.y) <= cfg.CLEAR_RADIUS
        data[near] = 0
    return OccupancyMap.from_array(data, cfg.RESOLUTION)


class PlannerBenchmark:
    def __init__(self):
        self.timestamp = time.strftime('%Y%m%d_%H%M%S')
        self.log_dir = os.path.join(cfg.LOG_DIR, self.timestamp)
        self.log_file = os.path.join(self.log_dir, "benchmark.txt")
        self.csv_file = os.path.join(self.log_dir, "results.csv")
        self.plot_file = os.path.join(self.log_dir, "results.png")
        os.makedirs(self.log_dir, exist_ok=True)

        config = PlannerConfig(resolution=cfg.RESOLUTION,
                               num_headings=cfg.NUM_HEADINGS,
                               default_time_budget_s=cfg.TIME_BUDGET_S,
                               epsilon_initial=cfg.EPSILON_INITIAL,
                               epsilon_decrement=cfg.EPSILON_DECREMENT)
        self.vehicle = CarModel(cfg.VEHICLE_CONFIG)
        self.finder = PathFinder(config, cfg.COLLISION_CONFIG, cache_dir=cfg.CACHE_DIR)
        self.finder.register_model(self.vehicle)

    def log(self, msg, to_console=True):
        with open(self.log_file, "a", encoding='utf-8') as f:
            f.write(msg + "\n")
        if to_console:
            print(msg)

    def run(self, trials_override=None, snapshots=False) -> pd.DataFrame:
        num_trials = trials_override if trials_override else cfg.NUM_TRIALS
        self.log(f"=== Lattice Planner Benchmark ({self.timestamp}) ===")
        self.log(f"Config: Densities={cfg.DENSITIES}, Trials={num_trials}, Budget={cfg.TIME_BUDGET_S}s")

        rows = []
        for density in cfg.DENSITIES:
            for i in range(num_trials):
                seed = cfg.RANDOM_SEED_BASE + int(density * 1000) + i
                grid_map = random_block_map(density, seed)

                for planner in (PlannerType.A_STAR, PlannerType.ARA_STAR):
                    observer = ExperimentObserver()
                    request = PlanningRequest(cfg.START_STATE, cfg.GOAL_STATE,
                                              self.vehicle.model_id, grid_map, planner=planner)
                    result = self.finder.find_path(request, observer=observer)
                    rows.append({
                        "density": density,
                        "trial": i,
                        "seed": seed,
                        "planner": planner.value,
                        "success": result.success,
                        "failure": result.failure_code.value if result.failure_code else "",
                        "cost": result.cost if result.success else np.nan,
                        "epsilon": result.epsilon if result.success else np.nan,
                        "partial": result.is_partial,
                        "solutions": len(result.solution_costs),
                        "expansions": result.expansions,
                        "time_ms": result.planning_time_s * 1000.0,
                    })
                    if snapshots and not result.success:
                        self._save_snapshot(grid_map, result, observer, planner.value, density, i)

        df = pd.DataFrame(rows)
        df.to_csv(self.csv_file, index=False)
        self._log_summary(df)
        self._plot_results(df)
        self.log(f"\nResults saved to {self.log_dir}")
        return df

    def _log_summary(self, df: pd.DataFrame):
        summary = df.groupby(["density", "planner"]).agg(
            success_rate=("success", "mean"),
            cost=("cost", "mean"),
            expansions=("expansions", "mean"),
            time_ms=("time_ms", "mean"),
        )
        self.log("-" * 60)
        self.log(summary.to_string(float_format=lambda v: f"{v:.2f}"))

    def _plot_results(self, df: pd.DataFrame):
        fig, axes = plt.subplots(1, 3, figsize=(15, 4))
        for planner, group in df.groupby("planner"):
            by_density = group.groupby("density")
            axes[0].plot(by_density["success"].mean(), marker='o', label=planner)
            axes[1].plot(by_density["time_ms"].mean(), marker='o', label=planner)
            axes[2].plot(by_density["cost"].mean(), marker='o', label=planner)
        for ax, label in zip(axes, ["Success rate", "Time (ms)", "Path cost"]):
            ax.set_xlabel("Obstacle density")
            ax.set_ylabel(label)
            ax.grid(True)
            ax.legend()
        fig.tight_layout()
        fig.savefig(self.plot_file)
        plt.close(fig)

    def _save_snapshot(self, grid_map, result, observer, name, density, trial_idx):
        filename = f"fail_{name}_d{density}_t{trial_idx}.png"
        fig, _ = plot_planning_result(grid_map, result, self.vehicle, observer,
                                      save_path=os.path.join(self.log_dir, filename))
        plt.close(fig)
        self.log(f"  [SNAPSHOT] {filename}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="A* vs ARA* on random block maps")
    parser.add_argument("--trials", type=int, help="Override number of trials per density")
    parser.add_argument("--snapshots", action="store_true", help="Save plots of failed runs")
    args = parser.parse_args()

    PlannerBenchmark().run(args.trials, args.snapshots)
