"""
Orchestration services for multi-step workflows.

The pipeline owns scenario-level logic (screen context flow, statistics,
prerequisites) so the resolution engine stays single-step.
"""

from .pipeline import (
    MappingPipeline,
    PipelineOptions,
    advance_context,
    collect_mapping_imports,
    compute_statistics,
)

__all__ = [
    "MappingPipeline",
    "PipelineOptions",
    "advance_context",
    "collect_mapping_imports",
    "compute_statistics",
]
