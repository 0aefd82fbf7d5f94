# resume_optimizer/__init__.py
"""
Resume scoring and optimization engine
"""

from resume_optimizer.config import EngineConfig, LLMConfig, get_config
from resume_optimizer.models import (
    ResumeDocument, ContactInfo, SkillCategory, WorkExperience,
    Project, Education, Certification
)
from resume_optimizer.errors import (
    FieldError, ResumeEngineError, ValidationError, ExternalServiceError,
    ParseAmbiguityWarning, ConvergenceIncomplete
)
from resume_optimizer.diagnostics import Diagnostics, DiagnosticEntry
from resume_optimizer.normalizer import normalize_resume, normalize_resume_text, NormalizationResult

__version__ = "0.1.0"

__all__ = [
    'EngineConfig',
    'LLMConfig',
    'get_config',
    'ResumeDocument',
    'ContactInfo',
    'SkillCategory',
    'WorkExperience',
    'Project',
    'Education',
    'Certification',
    'FieldError',
    'ResumeEngineError',
    'ValidationError',
    'ExternalServiceError',
    'ParseAmbiguityWarning',
    'ConvergenceIncomplete',
    'Diagnostics',
    'DiagnosticEntry',
    'normalize_resume',
    'normalize_resume_text',
    'NormalizationResult',
]
