# resume_optimizer/pipeline/__init__.py
"""
Step-based optimization workflow with versioned resume snapshots
"""

from resume_optimizer.pipeline.steps import PipelineStep, StepStatus, STEP_NAMES
from resume_optimizer.pipeline.state import (
    PipelineSnapshot, SnapshotHistory, PipelineState, ProgressIndicator, PipelineStepResult
)
from resume_optimizer.pipeline.controller import (
    PipelineController, PipelineAborted, identify_missing_sections, export_resume
)
from resume_optimizer.pipeline.project_analysis import ProjectAnalyzer, ProjectAnalysis, alignment_score

__all__ = [
    'PipelineStep',
    'StepStatus',
    'STEP_NAMES',
    'PipelineSnapshot',
    'SnapshotHistory',
    'PipelineState',
    'ProgressIndicator',
    'PipelineStepResult',
    'PipelineController',
    'PipelineAborted',
    'identify_missing_sections',
    'export_resume',
    'ProjectAnalyzer',
    'ProjectAnalysis',
    'alignment_score',
]
