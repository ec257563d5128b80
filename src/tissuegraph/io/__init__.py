"""Polygon input and saved tracking tables."""

from tissuegraph.io.wkt_reader import read_frame_wkt, read_wkt_series, write_frame_wkt
from tissuegraph.io.csv_tracks import CsvTrackReader, read_tracking

__all__ = ['read_frame_wkt', 'read_wkt_series', 'write_frame_wkt', 'CsvTrackReader', 'read_tracking']
