"""
Pipeline
========

Sequential task runner and the Carbon pipeline built on top of it.
"""

from carbon_now.core.pipeline.carbon import CarbonPipeline, PipelineContext, carbonize
from carbon_now.core.pipeline.engine import Task, TaskReporter, TaskRunner

__all__ = [
    "CarbonPipeline",
    "PipelineContext",
    "Task",
    "TaskReporter",
    "TaskRunner",
    "carbonize",
]
