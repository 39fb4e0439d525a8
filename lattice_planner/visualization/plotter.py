# 绘图逻辑 (Matplotlib)

import matplotlib.pyplot as plt
from matplotlib.patches import Polygon

from lattice_planner.map.base import OCCUPIED, UNKNOWN


def plot_map(ax, grid_map):
    """底图：障碍物黑色，未知灰色。origin='lower' 让 y 轴朝上"""
    img = grid_map.data.astype(float)
    img[grid_map.data == OCCUPIED] = 1.0
    img[grid_map.data == UNKNOWN] = 0.5
    ax.imshow(img, cmap='gray_r', origin='lower', extent=grid_map.extent, vmin=0.0, vmax=1.0)
    ax.set_aspect('equal')


def plot_planning_result(grid_map, result, vehicle=None, observer=None, ax=None,
                         footprint_every: int = 1, title: str = None, save_path: str = None):
    """
    画出地图、搜索过程 (如果给了 observer)、路径和车辆轮廓。

    :return: (fig, ax)
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))
    else:
        fig = ax.figure

    # 1. 画静态底图
    plot_map(ax, grid_map)

    # 2. 搜索过程：扩展过的节点
    if observer is not None and getattr(observer, 'expanded_nodes', None):
        xs = [n.x for n in observer.expanded_nodes]
        ys = [n.y for n in observer.expanded_nodes]
        ax.scatter(xs, ys, c='red', s=2, alpha=0.5, label='Explored')

    # 3. 路径与车辆轮廓
    if result is not None and result.success:
        states = result.dense_states()
        ax.plot([s.x for s in states], [s.y for s in states], 'b-', linewidth=1.5, label='Path')
        keys = result.configurations
        ax.plot([c.x for c in keys], [c.y for c in keys], 'bo', markersize=3)

        if vehicle is not None and footprint_every > 0:
            for step in result.path[::footprint_every]:
                for poly in vehicle.get_visualization_polygons(step.configuration.to_state()):
                    ax.add_patch(Polygon(poly, closed=True, fill=False, edgecolor='green',
                                         linewidth=0.8))

    if title is None and result is not None:
        if result.success:
            title = f"cost={result.cost:.2f}  eps={result.epsilon:.2f}  expansions={result.expansions}"
        else:
            title = f"{result.failure_code.value}: {result.message}"
    if title:
        ax.set_title(title)
    if ax.get_legend_handles_labels()[0]:
        ax.legend(loc='upper right')

    if save_path:
        fig.savefig(save_path, dpi=120, bbox_inches='tight')
    return fig, ax
