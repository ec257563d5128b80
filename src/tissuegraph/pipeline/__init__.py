"""Sequential tracking pipeline."""

from tissuegraph.pipeline.orchestrator import TrackingPipeline, PipelineResult, setup_logging

__all__ = ['TrackingPipeline', 'PipelineResult', 'setup_logging']
