import sys
import os

import pytest

# --- 路径设置 (不安装也能导入 lattice_planner) ---
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lattice_planner.config import PlannerConfig
from lattice_planner.map.occupancy_map import OccupancyMap
from lattice_planner.vehicles import (
    ArticulatedConfig, ArticulatedModel, CarConfig, CarModel, UnicycleConfig, UnicycleModel,
)
from lattice_planner.planning.path_finder import PathFinder


# 1 m 分辨率下能在一个格子里停下的小车
SMALL_CAR = dict(wheelbase=0.3, front_hang=0.1, rear_hang=0.1, width=0.4,
                 safe_margin=0.0, max_steer_deg=40.0)


@pytest.fixture
def small_car():
    return CarModel(CarConfig(**SMALL_CAR))


@pytest.fixture
def small_lhd():
    # 静止时两节车体都在自己的格子内 (离参考点最远 0.4 m)
    return ArticulatedModel(ArticulatedConfig(front_length=0.15, rear_length=0.15,
                                              front_overhang=0.1, rear_overhang=0.05,
                                              width=0.4, safe_margin=0.0))


@pytest.fixture
def small_unicycle():
    return UnicycleModel(UnicycleConfig(width=0.4, length=0.4, safe_margin=0.0))


@pytest.fixture
def scenario_map():
    """
    10 x 10, 1 m/cell, 原点 (0, -5)：世界坐标 (0, 0) 在格子 (0, 5)。
    返回工厂函数，参数为障碍格子列表。
    """
    def make(obstacles=()):
        grid_map = OccupancyMap(10, 10, resolution=1.0, origin=(0.0, -5.0))
        return grid_map.updated(obstacles) if obstacles else grid_map
    return make


@pytest.fixture
def scenario_config():
    return PlannerConfig(resolution=1.0, num_headings=16, default_time_budget_s=None)


@pytest.fixture
def car_finder(scenario_config, small_car):
    finder = PathFinder(scenario_config)
    finder.register_model(small_car)
    return finder


@pytest.fixture
def unicycle_finder(scenario_config, small_unicycle):
    finder = PathFinder(scenario_config)
    finder.register_model(small_unicycle)
    return finder
