# lattice_planner/primitives/table.py
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Union

from lattice_planner.errors import ConfigError, PrimitiveTableError
from lattice_planner.types import Configuration, HeadingSet
from .primitive import MotionPrimitive
from .store import dump_table, parse_table

logger = logging.getLogger(__name__)

TABLE_SUFFIX = ".mprim"


def cache_filename(model_id: str, resolution: float, num_headings: int) -> str:
    return f"{model_id}_r{resolution:g}_n{num_headings}{TABLE_SUFFIX}"


class PrimitiveTable:
    """
    某个车型、分辨率、航向数下的全部 primitive，按起始航向分组。
    构造后只读，可以在多个规划请求之间共享。
    """

    def __init__(self, model_id: str, resolution: float, num_headings: int,
                 primitives: List[MotionPrimitive], source=None):
        self.model_id = model_id
        self.resolution = float(resolution)
        self.headings = HeadingSet(num_headings)
        self.source = source

        by_id: Dict[int, MotionPrimitive] = {}
        by_heading: Dict[int, List[MotionPrimitive]] = {h: [] for h in range(num_headings)}
        for p in primitives:
            if p.primitive_id in by_id:
                raise PrimitiveTableError(f"duplicate primitive id {p.primitive_id}", source)
            if p.start_heading not in by_heading or not 0 <= p.end_heading < num_headings:
                raise PrimitiveTableError(
                    f"primitive {p.primitive_id} has heading out of range", source)
            by_id[p.primitive_id] = p
            by_heading[p.start_heading].append(p)

        empty = [h for h, prims in by_heading.items() if not prims]
        if empty:
            raise PrimitiveTableError(f"no primitives for headings {empty}", source)

        self._by_id = by_id
        self._by_heading = {h: tuple(prims) for h, prims in by_heading.items()}

    @property
    def num_headings(self) -> int:
        return self.headings.num_headings

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        for h in range(self.num_headings):
            yield from self._by_heading[h]

    def primitives_at(self, heading: int):
        return self._by_heading[self.headings.wrap(heading)]

    def by_id(self, primitive_id: int) -> MotionPrimitive:
        try:
            return self._by_id[primitive_id]
        except KeyError:
            raise PrimitiveTableError(f"unknown primitive id {primitive_id}", self.source) from None

    # ------------------------------------------------------------------
    @classmethod
    def build(cls, vehicle, resolution: float, headings: Union[HeadingSet, int] = 16,
              workers: int = 1) -> "PrimitiveTable":
        """
        为每个航向生成 primitive。各航向互不依赖，workers > 1 时并行；
        id 按 (航向, 生成顺序) 分配，所以结果与 workers 无关。
        """
        if not isinstance(headings, HeadingSet):
            headings = HeadingSet(headings)
        t0 = time.time()

        def generate(h):
            return vehicle.primitives_for(h, headings, resolution)

        indices = range(headings.num_headings)
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                per_heading = list(pool.map(generate, indices))
        else:
            per_heading = [generate(h) for h in indices]

        primitives = []
        for prims in per_heading:
            for p in prims:
                primitives.append(p.with_id(len(primitives)))

        logger.info("Built %d primitives for '%s' (res=%g, N=%d) in %.2fs",
                    len(primitives), vehicle.model_id, resolution,
                    headings.num_headings, time.time() - t0)
        return cls(vehicle.model_id, resolution, headings.num_headings, primitives)

    @classmethod
    def load(cls, path, model_id: Optional[str] = None, resolution: Optional[float] = None,
             num_headings: Optional[int] = None) -> "PrimitiveTable":
        """读取表文件；给出期望值时检查是否匹配"""
        if not os.path.exists(path):
            raise PrimitiveTableError("primitive table not found", path)

        file_model, file_res, file_n, primitives = parse_table(path)
        if model_id is not None and file_model != model_id:
            raise PrimitiveTableError(
                f"table is for model '{file_model}', expected '{model_id}'", path)
        if resolution is not None and abs(file_res - resolution) > 1e-9:
            raise PrimitiveTableError(
                f"table resolution {file_res:g} does not match {resolution:g}", path)
        if num_headings is not None and file_n != num_headings:
            raise PrimitiveTableError(
                f"table has {file_n} headings, expected {num_headings}", path)

        try:
            table = cls(file_model, file_res, file_n, primitives, source=path)
        except PrimitiveTableError:
            raise
        except ConfigError as e:
            # 不支持的航向数
            raise PrimitiveTableError(str(e), path) from e
        logger.info("Loaded %d primitives from %s", len(table), path)
        return table

    def save(self, path):
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        dump_table(path, self.model_id, self.resolution, self.num_headings, list(self))
        logger.info("Saved %d primitives to %s", len(self), path)

    @classmethod
    def load_or_build(cls, vehicle, resolution: float, headings: Union[HeadingSet, int] = 16,
                      cache_dir: str = "primitives_cache", workers: int = 1) -> "PrimitiveTable":
        """缓存存在就读，不存在就生成并写入。重复调用结果相同。"""
        if not isinstance(headings, HeadingSet):
            headings = HeadingSet(headings)
        path = os.path.join(cache_dir,
                            cache_filename(vehicle.model_id, resolution, headings.num_headings))
        if os.path.exists(path):
            return cls.load(path, vehicle.model_id, resolution, headings.num_headings)

        table = cls.build(vehicle, resolution, headings, workers)
        table.save(path)
        table.source = path
        return table

    def __repr__(self) -> str:
        return (f"PrimitiveTable(model_id={self.model_id!r}, res={self.resolution:g}, "
                f"N={self.num_headings}, primitives={len(self)})")


class PrimitiveSelector:
    """
    从表中挑出对当前车辆和地图可用的 primitive。

    运动学过滤在构造时做一次；边界过滤每次扩展时按扫掠包围盒做。
    """

    def __init__(self, table: PrimitiveTable, vehicle):
        self.table = table
        self.vehicle = vehicle

        valid = {}
        for h in range(table.num_headings):
            prims = tuple(p for p in table.primitives_at(h) if vehicle.is_kinematically_valid(p))
            if not prims:
                raise PrimitiveTableError(
                    f"no kinematically valid primitives for heading {h} of '{vehicle.model_id}'",
                    table.source)
            valid[h] = prims
        self._valid = valid

    def valid_at(self, heading: int):
        return self._valid[self.table.headings.wrap(heading)]

    def select(self, config: Configuration, grid_map) -> List[MotionPrimitive]:
        """扫掠包围盒完全落在地图内的 primitive，顺序与表一致"""
        result = []
        for p in self._valid[config.itheta]:
            x0 = config.ix + p.swept_min[0]
            y0 = config.iy + p.swept_min[1]
            x1 = config.ix + p.swept_max[0]
            y1 = config.iy + p.swept_max[1]
            if grid_map.in_bounds(x0, y0) and grid_map.in_bounds(x1, y1):
                result.append(p)
        return result
