# -*- coding: utf-8 -*-
"""
Point-cloud store.

PlanePointCloud keeps positions and colors in two growing numpy buffers. Order
carries no meaning: swap removal moves the last point into the freed slot, so
indices are only valid until the next removal.

Supported files: ply (ascii/binary, via plyfile), npz, xyz/txt, las/laz (via laspy).
"""
from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

import laspy
import numpy as np
from plyfile import PlyData, PlyElement

from planefinder.Errors import InputReadError, OutputWriteError

logger = logging.getLogger(__name__)

_EXT_LOAD_FORMAT = {'.ply': 'ply', '.npz': 'npz', '.xyz': 'xyz', '.txt': 'xyz', '.las': 'las', '.laz': 'las'}
_EXT_EXPORT_FORMAT = {'.ply': 'ply_bin', '.npz': 'npz', '.xyz': 'xyz', '.txt': 'xyz', '.las': 'las'}
EXPORT_FORMATS = ('ply_bin', 'ply_txt', 'npz', 'xyz', 'las')


class Point3D:
    __slots__ = ("coord", "color")

    def __init__(self, X: float, Y: float, Z: float, R=0, G=0, B=0):
        self.coord = np.asarray([X, Y, Z], dtype=np.float64)
        self.color = np.clip(np.asarray([R, G, B], dtype=np.int64), 0, 255).astype(np.uint8)

    def __repr__(self):
        x, y, z = self.coord
        r, g, b = self.color
        return f"Point3D({x:.6g}, {y:.6g}, {z:.6g}, rgb=({r}, {g}, {b}))"


class PlanePointCloud:
    def __init__(self, coords: Optional[np.ndarray] = None, colors: Optional[np.ndarray] = None):
        self._coords = np.empty((0, 3), dtype=np.float64)
        self._colors = np.empty((0, 3), dtype=np.uint8)
        self._size = 0
        if coords is not None:
            self.extend(coords, colors)

    # ---------- size / views ----------
    @property
    def number(self):
        return self._size

    def __len__(self):
        return self._size

    @property
    def coords(self) -> np.ndarray:
        """(N,3) float64 view of the live positions."""
        return self._coords[:self._size]

    @property
    def colors(self) -> np.ndarray:
        """(N,3) uint8 view of the live colors."""
        return self._colors[:self._size]

    def copy(self) -> "PlanePointCloud":
        return PlanePointCloud(self.coords.copy(), self.colors.copy())

    def _check_index(self, index: int) -> int:
        index = int(index)
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"point index {index} out of range for cloud of {self._size} points")
        return index

    def _reserve(self, extra: int):
        need = self._size + extra
        cap = self._coords.shape[0]
        if need <= cap:
            return
        new_cap = max(need, 2 * cap, 16)
        coords = np.empty((new_cap, 3), dtype=np.float64)
        colors = np.zeros((new_cap, 3), dtype=np.uint8)
        coords[:self._size] = self._coords[:self._size]
        colors[:self._size] = self._colors[:self._size]
        self._coords, self._colors = coords, colors

    # ---------- random access ----------
    def __getitem__(self, index: int) -> Point3D:
        i = self._check_index(index)
        X, Y, Z = self._coords[i]
        R, G, B = self._colors[i]
        return Point3D(X, Y, Z, R, G, B)

    def __setitem__(self, index: int, point: Point3D):
        i = self._check_index(index)
        self._coords[i] = point.coord
        self._colors[i] = point.color

    def rewrite_point(self, index: int, **kwargs):
        """Overwrite selected fields (X, Y, Z, R, G, B) of one point."""
        i = self._check_index(index)
        p = self[i]
        self[i] = Point3D(
            kwargs.get('X', p.coord[0]), kwargs.get('Y', p.coord[1]), kwargs.get('Z', p.coord[2]),
            kwargs.get('R', p.color[0]), kwargs.get('G', p.color[1]), kwargs.get('B', p.color[2]),
        )

    # ---------- growth ----------
    def append(self, point: Point3D):
        self._reserve(1)
        self._coords[self._size] = point.coord
        self._colors[self._size] = point.color
        self._size += 1

    def add(self, X: float, Y: float, Z: float, R=0, G=0, B=0):
        self.append(Point3D(X, Y, Z, R, G, B))

    def extend(self, coords: np.ndarray, colors: Optional[np.ndarray] = None):
        coords = np.asarray(coords, dtype=np.float64).reshape(-1, 3)
        n = coords.shape[0]
        if colors is None:
            colors = np.zeros((n, 3), dtype=np.uint8)
        colors = np.asarray(colors).reshape(-1, 3)
        if colors.shape[0] != n:
            raise ValueError(f"got {n} positions but {colors.shape[0]} colors")
        self._reserve(n)
        self._coords[self._size:self._size + n] = coords
        self._colors[self._size:self._size + n] = np.clip(colors, 0, 255).astype(np.uint8)
        self._size += n

    # ---------- removal ----------
    def swap_remove(self, index: int) -> Point3D:
        """O(1): move the last point into `index` and shrink. Returns the removed point."""
        i = self._check_index(index)
        removed = self[i]
        last = self._size - 1
        if i != last:
            self._coords[i] = self._coords[last]
            self._colors[i] = self._colors[last]
        self._size = last
        return removed

    def swap_remove_many(self, indices: Iterable[int]) -> "PlanePointCloud":
        """
        Swap-remove a batch of indices, highest first, so that every slot not yet
        processed still holds the point it held when the indices were computed.
        Returns the removed points in the order they were removed (descending index).
        """
        idx = np.unique(_as_index_array(indices))
        removed = PlanePointCloud()
        if idx.size == 0:
            return removed
        if idx[0] < 0 or idx[-1] >= self._size:
            raise IndexError(f"indices must lie in [0, {self._size}), got [{idx[0]}, {idx[-1]}]")
        order = idx[::-1]
        # rows below the one being removed are untouched until their turn
        removed.extend(self._coords[order], self._colors[order])
        for i in order:
            last = self._size - 1
            if i != last:
                self._coords[i] = self._coords[last]
                self._colors[i] = self._colors[last]
            self._size = last
        return removed

    def compact_remove(self, indices: Iterable[int]) -> "PlanePointCloud":
        """Mark the indices and compact once. Both parts keep their relative order."""
        idx = _as_index_array(indices)
        if idx.size and (idx.min() < 0 or idx.max() >= self._size):
            raise IndexError(f"indices must lie in [0, {self._size})")
        mask = np.zeros(self._size, dtype=bool)
        mask[idx] = True
        removed = PlanePointCloud(self.coords[mask], self.colors[mask])
        keep = ~mask
        n_keep = int(keep.sum())
        self._coords[:n_keep] = self.coords[keep]
        self._colors[:n_keep] = self.colors[keep]
        self._size = n_keep
        return removed

    # ---------- file io ----------
    def load(self, path, format: Optional[str] = None) -> "PlanePointCloud":
        path = str(path)
        if not os.path.exists(path):
            raise InputReadError(path, "file does not exist")
        if format is None:
            ext = os.path.splitext(path)[1].lower()
            if ext not in _EXT_LOAD_FORMAT:
                raise InputReadError(path, f"unsupported file extension '{ext}'")
            format = _EXT_LOAD_FORMAT[ext]

        try:
            if format == 'ply':
                coords, colors = _read_ply(path)
            elif format == 'npz':
                with np.load(path) as data:
                    coords = np.asarray(data['coords'], dtype=np.float64)
                    colors = data['colors'] if 'colors' in data.files else None
            elif format == 'xyz':
                data = np.loadtxt(path, dtype=np.float64, ndmin=2)
                if data.size and data.shape[1] < 3:
                    raise ValueError("expected at least 3 columns (X Y Z)")
                coords = data[:, :3] if data.size else np.empty((0, 3))
                colors = data[:, 3:6] if data.size and data.shape[1] >= 6 else None
            elif format == 'las':
                coords, colors = _read_las(path)
            else:
                raise ValueError(f"unsupported load format '{format}'")
        except InputReadError:
            raise
        except Exception as e:
            raise InputReadError(path, e) from e

        self._size = 0
        try:
            self.extend(coords, colors)
        except ValueError as e:
            raise InputReadError(path, e) from e
        logger.debug("Loaded %d points from %s (%s)", self._size, path, format)
        return self

    def export(self, path, format: Optional[str] = None):
        '''
        :param path: save path
        :param format: ply_bin, ply_txt, npz, xyz, las (default: from the extension)
        las stores integer coordinates: the step per axis is the smallest power of ten
        that fits the extent in 2**30 steps, never finer than 1e-9.
        '''
        path = str(path)
        if format is None:
            ext = os.path.splitext(path)[1].lower()
            if ext not in _EXT_EXPORT_FORMAT:
                raise OutputWriteError(path, f"unsupported file extension '{ext}'")
            format = _EXT_EXPORT_FORMAT[ext]
        if format not in EXPORT_FORMATS:
            raise OutputWriteError(path, f"unsupported export format '{format}'")

        coords, colors = self.coords, self.colors
        try:
            os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
            if format in ('ply_bin', 'ply_txt'):
                vertex_data = np.empty(self._size, dtype=[
                    ('x', 'f8'), ('y', 'f8'), ('z', 'f8'),
                    ('red', 'u1'), ('green', 'u1'), ('blue', 'u1'),
                ])
                vertex_data['x'], vertex_data['y'], vertex_data['z'] = coords.T
                vertex_data['red'], vertex_data['green'], vertex_data['blue'] = colors.T
                el = PlyElement.describe(vertex_data, 'vertex')
                PlyData([el], text=(format == 'ply_txt')).write(path)
            elif format == 'npz':
                with open(path, 'wb') as f:
                    np.savez(f, coords=coords, colors=colors)
            elif format == 'xyz':
                data = np.hstack([coords, colors.astype(np.float64)])
                np.savetxt(path, data, fmt='%.9f %.9f %.9f %d %d %d')
            elif format == 'las':
                _write_las(path, coords, colors)
        except Exception as e:
            raise OutputWriteError(path, e) from e
        logger.debug("Exported %d points to %s (%s)", self._size, path, format)


def _as_index_array(indices) -> np.ndarray:
    if not isinstance(indices, np.ndarray):
        indices = list(indices)
    return np.asarray(indices, dtype=np.int64).reshape(-1)


def _read_ply(path):
    ply = PlyData.read(path)
    if 'vertex' not in ply:
        raise ValueError("No 'vertex' element in PLY")
    v = ply['vertex']
    names = v.data.dtype.names
    if not all(p in names for p in ('x', 'y', 'z')):
        raise ValueError("PLY 'vertex' element must have x,y,z")
    coords = np.vstack([v['x'], v['y'], v['z']]).T.astype(np.float64, copy=False)
    colors = None
    if all(p in names for p in ('red', 'green', 'blue')):
        colors = np.vstack([v['red'], v['green'], v['blue']]).T
        if np.issubdtype(colors.dtype, np.floating) and colors.size and colors.max() <= 1.0:
            colors = np.round(colors * 255.0)
        elif np.issubdtype(colors.dtype, np.integer) and colors.size and colors.max() > 255:
            # 16-bit channels, as in LAS
            colors = colors.astype(np.int64) >> 8
    return coords, colors


def _read_las(path):
    las = laspy.read(path)
    coords = np.vstack([np.asarray(las.x), np.asarray(las.y), np.asarray(las.z)]).T.astype(np.float64)
    colors = None
    if 'red' in las.point_format.dimension_names:
        colors = np.vstack([np.asarray(las.red), np.asarray(las.green), np.asarray(las.blue)]).T
        if colors.size and colors.max() > 255:
            colors = colors >> 8
    return coords, colors


def _las_scales(coords):
    """Power-of-ten scale per axis so that the extent fits in 2**30 steps (never finer than 1e-9)."""
    if coords.shape[0] == 0:
        return np.array([1e-9, 1e-9, 1e-9])
    steps = np.maximum(np.ptp(coords, axis=0) / 2 ** 30, 1e-9)
    return 10.0 ** np.ceil(np.log10(steps))


def _write_las(path, coords, colors):
    header = laspy.LasHeader(point_format=3, version="1.2")
    header.scales = _las_scales(coords)
    if coords.shape[0]:
        header.offsets = coords.min(axis=0)
    las = laspy.LasData(header)

    las.x = coords[:, 0]
    las.y = coords[:, 1]
    las.z = coords[:, 2]
    las.red = colors[:, 0].astype(np.uint16)
    las.green = colors[:, 1].astype(np.uint16)
    las.blue = colors[:, 2].astype(np.uint16)

    las.write(path)


def read_point_cloud(path, format: Optional[str] = None) -> PlanePointCloud:
    return PlanePointCloud().load(path, format=format)


def write_point_cloud(cloud: PlanePointCloud, path, format: Optional[str] = None):
    cloud.export(path, format=format)
