import pytest
import tempfile
import shutil
from pathlib import Path

from tissuegraph.io import write_frame_wkt
from tissuegraph.schemas import ParamConfig, InternalConfig, UserConfig
from tissuegraph.schemas.resolve import resolve_config

from tests.helpers.tiling import t1_series


@pytest.fixture
def temp_dir():
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d)


@pytest.fixture
def pipeline_config(temp_dir) -> InternalConfig:
    """InternalConfig for pipeline tests; the T1 tiles are all border cells."""
    user = UserConfig(BORDER_LAYERS=0, OUTPUT_DIR=str(temp_dir / "out"))
    return resolve_config(ParamConfig(), user, None)


@pytest.fixture
def t1_frames_dir(temp_dir):
    """Directory with the four T1 frames as WKT files."""
    frames_dir = temp_dir / "frames"
    for t, polygons in enumerate(t1_series()):
        write_frame_wkt(polygons, frames_dir / f"frame_{t:03d}.wkt")
    return frames_dir
