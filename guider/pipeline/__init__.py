"""Completion pipeline module."""

from guider.pipeline.completion import CompletionPipeline
from guider.pipeline.factory import build_pipeline
from guider.pipeline.models import PipelineResult

__all__ = [
    "CompletionPipeline",
    "PipelineResult",
    "build_pipeline",
]
