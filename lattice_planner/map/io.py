# lattice_planner/map/io.py
import os
import zipfile

import numpy as np

from lattice_planner.errors import MapFormatError
from .occupancy_map import OccupancyMap


def save_map(grid_map: OccupancyMap, path: str):
    """保存为 .npz: data, resolution, origin, unknown_is_occupied"""
    np.savez(path,
             data=grid_map.data,
             resolution=np.array(grid_map.resolution),
             origin=np.array(grid_map.origin),
             unknown_is_occupied=np.array(grid_map.unknown_is_occupied))


def load_map(path: str) -> OccupancyMap:
    if not os.path.exists(path):
        raise MapFormatError(f"Map file not found: {path}")

    try:
        archive = np.load(path, allow_pickle=False)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise MapFormatError(f"{path}: cannot read map archive ({e})") from e

    if not isinstance(archive, np.lib.npyio.NpzFile):
        raise MapFormatError(f"{path}: expected an .npz archive")

    with archive:
        missing = {"data", "resolution", "origin"} - set(archive.files)
        if missing:
            raise MapFormatError(f"{path}: missing arrays {sorted(missing)}")
        data = archive["data"]
        resolution = float(archive["resolution"])
        origin = archive["origin"].astype(float)
        unknown_is_occupied = True
        if "unknown_is_occupied" in archive.files:
            unknown_is_occupied = bool(archive["unknown_is_occupied"])

    if data.ndim != 2 or origin.shape != (2,):
        raise MapFormatError(f"{path}: expected 2-D data and a 2-element origin")

    try:
        return OccupancyMap.from_array(data, resolution, (origin[0], origin[1]), unknown_is_occupied)
    except ValueError as e:
        raise MapFormatError(f"{path}: {e}") from e
