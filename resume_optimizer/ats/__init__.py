# resume_optimizer/ats/__init__.py
"""
JD requirement extraction and 16-parameter resume scoring
"""

from resume_optimizer.ats.models import (
    KeywordCategory, Importance, Seniority, RequirementKeyword,
    JobRequirementProfile, ParameterScore, ScoreReport
)
from resume_optimizer.ats.jd_extractor import JDExtractor, extract_profile
from resume_optimizer.ats.parameters import PARAMETERS, PARAMETERS_BY_ID, ParameterSpec
from resume_optimizer.ats.scorer import ResumeScorer, score_resume

__all__ = [
    'KeywordCategory',
    'Importance',
    'Seniority',
    'RequirementKeyword',
    'JobRequirementProfile',
    'ParameterScore',
    'ScoreReport',
    'JDExtractor',
    'extract_profile',
    'PARAMETERS',
    'PARAMETERS_BY_ID',
    'ParameterSpec',
    'ResumeScorer',
    'score_resume',
]
