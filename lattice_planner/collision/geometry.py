# lattice_planner/collision/geometry.py
import math

import numpy as np


def _edge_normals(poly: np.ndarray) -> np.ndarray:
    """凸多边形各边的单位法向量 (退化边去掉)"""
    edges = np.roll(poly, -1, axis=0) - poly
    normals = np.stack([-edges[:, 1], edges[:, 0]], axis=1)
    lengths = np.linalg.norm(normals, axis=1)
    keep = lengths > 1e-12
    return normals[keep] / lengths[keep, None]


def check_sat_polygon_collision(poly1: np.ndarray, poly2: np.ndarray) -> bool:
    """
    分离轴定理：两个凸多边形 (N, 2) / (M, 2) 是否相交，接触也算相交。
    """
    poly1 = np.asarray(poly1, dtype=float)
    poly2 = np.asarray(poly2, dtype=float)
    axes = np.vstack([_edge_normals(poly1), _edge_normals(poly2)])
    p1 = poly1 @ axes.T  # (N, A)
    p2 = poly2 @ axes.T
    separated = (p1.max(axis=0) < p2.min(axis=0)) | (p2.max(axis=0) < p1.min(axis=0))
    return not separated.any()


def polygon_cells(poly: np.ndarray, resolution: float) -> np.ndarray:
    """
    栅格化：返回与凸多边形重叠 (含接触) 的所有格子索引 (K, 2)。

    格子 (i, j) 覆盖 [i*res, (i+1)*res) x [j*res, (j+1)*res)。
    在多边形 AABB 范围内对所有格子一次性做向量化 SAT：
    x/y 轴由 AABB 本身保证，只需再检查多边形各边的法向量。
    """
    poly = np.asarray(poly, dtype=float)
    min_x, min_y = np.min(poly, axis=0)
    max_x, max_y = np.max(poly, axis=0)

    ix0 = int(math.floor(min_x / resolution))
    ix1 = int(math.floor(max_x / resolution))
    iy0 = int(math.floor(min_y / resolution))
    iy1 = int(math.floor(max_y / resolution))

    xs = np.arange(ix0, ix1 + 1)
    ys = np.arange(iy0, iy1 + 1)
    gx, gy = np.meshgrid(xs, ys)
    cells = np.stack([gx.ravel(), gy.ravel()], axis=1)

    # (K, 4, 2) 每个格子的四个角点
    unit = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
    corners = (cells[:, None, :] + unit[None, :, :]) * resolution

    axes = _edge_normals(poly)
    p_proj = poly @ axes.T               # (N, A)
    c_proj = corners @ axes.T            # (K, 4, A)
    separated = (c_proj.max(axis=1) < p_proj.min(axis=0)) | (c_proj.min(axis=1) > p_proj.max(axis=0))
    keep = ~separated.any(axis=1)

    return cells[keep].astype(np.int32)
