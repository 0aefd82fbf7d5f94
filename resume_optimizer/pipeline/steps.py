# resume_optimizer/pipeline/steps.py
from enum import Enum, IntEnum
from typing import Optional


class PipelineStep(IntEnum):
    """Ordered workflow steps"""
    PARSE_RESUME = 1
    ANALYZE_AGAINST_JD = 2
    MISSING_SECTIONS = 3
    PROJECT_ANALYSIS = 4
    RE_ANALYSIS = 5
    BULLET_REWRITING = 6
    FINAL_OPTIMIZATION = 7
    OUTPUT_RESUME = 8


class StepStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


STEP_NAMES = {
    PipelineStep.PARSE_RESUME: 'Parse Resume',
    PipelineStep.ANALYZE_AGAINST_JD: 'Analyze Against Job Description',
    PipelineStep.MISSING_SECTIONS: 'Complete Missing Sections',
    PipelineStep.PROJECT_ANALYSIS: 'Analyze Projects',
    PipelineStep.RE_ANALYSIS: 'Re-analyze After Changes',
    PipelineStep.BULLET_REWRITING: 'Rewrite Bullet Points',
    PipelineStep.FINAL_OPTIMIZATION: 'Final Optimization',
    PipelineStep.OUTPUT_RESUME: 'Generate Optimized Resume',
}

STEP_DESCRIPTIONS = {
    PipelineStep.PARSE_RESUME: 'Extracting structured data from the resume',
    PipelineStep.ANALYZE_AGAINST_JD: 'Scoring the resume against the job description on 16 parameters',
    PipelineStep.MISSING_SECTIONS: 'Provide any missing sections to complete the resume',
    PipelineStep.PROJECT_ANALYSIS: 'Reviewing projects for alignment with the job requirements',
    PipelineStep.RE_ANALYSIS: 'Re-scoring the resume after changes',
    PipelineStep.BULLET_REWRITING: 'Rewriting bullet points with action verbs and quantified results',
    PipelineStep.FINAL_OPTIMIZATION: 'Applying parameter fixes until the target score is reached',
    PipelineStep.OUTPUT_RESUME: 'Generating the optimized resume and comparison',
}

PROGRESS_WEIGHTS = {
    PipelineStep.PARSE_RESUME: 15,
    PipelineStep.ANALYZE_AGAINST_JD: 15,
    PipelineStep.MISSING_SECTIONS: 10,
    PipelineStep.PROJECT_ANALYSIS: 15,
    PipelineStep.RE_ANALYSIS: 10,
    PipelineStep.BULLET_REWRITING: 15,
    PipelineStep.FINAL_OPTIMIZATION: 15,
    PipelineStep.OUTPUT_RESUME: 5,
}

# Steps that pause for a decision; called without input they return an analysis
USER_INPUT_STEPS = frozenset([PipelineStep.MISSING_SECTIONS, PipelineStep.PROJECT_ANALYSIS])

USER_ACTION_DESCRIPTIONS = {
    PipelineStep.MISSING_SECTIONS: 'Please provide missing resume sections to continue',
    PipelineStep.PROJECT_ANALYSIS: 'Review and modify your projects for better job alignment',
}

TOTAL_STEPS = len(PipelineStep)


def next_step(step: PipelineStep) -> Optional[PipelineStep]:
    if step == PipelineStep.OUTPUT_RESUME:
        return None
    return PipelineStep(step + 1)


def previous_step(step: PipelineStep) -> Optional[PipelineStep]:
    if step == PipelineStep.PARSE_RESUME:
        return None
    return PipelineStep(step - 1)
