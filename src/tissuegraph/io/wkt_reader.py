"""WKT polygon input.

One text file per frame. Every non-empty line holds a WKT geometry;
multi-part geometries and collections are flattened into their polygons.
Lines starting with ``#`` are comments.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

from shapely import wkt
from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

__all__ = ['read_frame_wkt', 'read_wkt_series', 'write_frame_wkt']

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _polygons_of(geometry: BaseGeometry) -> List[Polygon]:
    if geometry.is_empty:
        return []
    if geometry.geom_type == "Polygon":
        return [geometry]
    if hasattr(geometry, "geoms"):
        polygons = []
        for part in geometry.geoms:
            polygons.extend(_polygons_of(part))
        return polygons
    return []


def read_frame_wkt(path: PathLike) -> List[Polygon]:
    """Read the cell polygons of one frame.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If a line is not valid WKT.
    """
    path = Path(path)
    polygons: List[Polygon] = []
    skipped = 0

    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                geometry = wkt.loads(line)
            except GEOSException as e:
                raise ValueError(f"{path}:{line_no}: invalid WKT ({e})") from e
            parts = _polygons_of(geometry)
            if not parts:
                skipped += 1
            polygons.extend(parts)

    if skipped:
        logger.warning("%s: skipped %d non-polygonal geometries", path.name, skipped)
    logger.debug("Read %d polygons from %s", len(polygons), path)
    return polygons


def read_wkt_series(directory: PathLike, pattern: str = "frame_%03d.wkt") -> List[List[Polygon]]:
    """Read consecutive frame files ``pattern % 0``, ``pattern % 1``, ...

    Reading stops at the first missing index.

    Raises
    ------
    FileNotFoundError
        If the directory holds no frame 0.
    """
    directory = Path(directory)
    series = []
    while True:
        path = directory / (pattern % len(series))
        if not path.exists():
            break
        series.append(read_frame_wkt(path))

    if not series:
        raise FileNotFoundError(f"No frame files matching '{pattern}' in {directory}")

    logger.info("Loaded %d frames from %s", len(series), directory)
    return series


def write_frame_wkt(polygons: Sequence[Polygon], path: PathLike) -> Path:
    """Write one polygon per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for polygon in polygons:
            f.write(polygon.wkt + "\n")
    return path
