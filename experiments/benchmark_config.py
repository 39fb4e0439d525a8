import sys
import os

# Ensure lattice_planner can be imported when the script is run from a checkout
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lattice_planner.types import State
from lattice_planner.vehicles.config import CarConfig
from lattice_planner.collision.config import CollisionConfig, CollisionMethod


class BenchmarkConfig:
    # --- Experiment Settings ---
    DENSITIES = [0.02, 0.05, 0.08]  # Fraction of cells covered by obstacle blocks
    NUM_TRIALS = 5                  # Number of trials per density
    RANDOM_SEED_BASE = 1000         # Base seed for reproducibility

    # --- Output Paths ---
    _BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    _PROJECT_DIR = os.path.dirname(_BASE_DIR)
    LOG_DIR = os.path.join(_PROJECT_DIR, "logs", "experiments_lattice")
    CACHE_DIR = os.path.join(_PROJECT_DIR, "primitives_cache")

    # --- Map Parameters ---
    PHYS_WIDTH = 30.0              # meters
    PHYS_HEIGHT = 30.0             # meters
    RESOLUTION = 0.5               # meters/cell
    NUM_HEADINGS = 16

    # Derived Map Settings
    MAP_WIDTH = int(PHYS_WIDTH / RESOLUTION)
    MAP_HEIGHT = int(PHYS_HEIGHT / RESOLUTION)

    # Obstacle blocks are squares of 1..MAX_BLOCK cells
    MAX_BLOCK = 4

    # --- Start & Goal ---
    START_STATE = State(3.0, 3.0, 0.0)
    GOAL_STATE = State(26.0, 26.0, 0.0)

    # Area clearing around start/goal
    CLEAR_RADIUS = 3.0             # meters

    # --- Vehicle Configuration ---
    VEHICLE_CONFIG = CarConfig(
        wheelbase=1.2,
        max_steer_deg=40.0,
        width=0.9,
        front_hang=0.4,
        rear_hang=0.3,
        safe_margin=0.1,
    )

    # --- Collision Checking ---
    COLLISION_CONFIG = CollisionConfig(method=CollisionMethod.RASTER)

    # --- Algorithm Parameters ---
    TIME_BUDGET_S = 2.0
    EPSILON_INITIAL = 3.0
    EPSILON_DECREMENT = 0.5
