"""
Typed failures raised by pipeline steps.

Every error carries the name of the step that raised it so the driver can
report where an image failed, not only why.
"""
from __future__ import annotations


class PipelineError(Exception):
    """Base class for all per-image pipeline failures."""

    stage = "pipeline"

    def __init__(self, reason, stage=None):
        super().__init__(reason)
        self.reason = reason
        if stage is not None:
            self.stage = stage

    def __str__(self):
        return f"[{self.stage}] {self.reason}"


class EmptyRegionAfterThreshold(PipelineError):
    """A step left no foreground pixels to work with."""

    stage = "binarize"


class InsufficientPointsForMesh(PipelineError):
    """Fewer than 3 distinct, non-collinear points reached the mesh builder."""

    stage = "mesh"


class DegenerateStructuringElement(PipelineError, ValueError):
    """A structuring element was requested with a non-positive size."""

    stage = "config"
