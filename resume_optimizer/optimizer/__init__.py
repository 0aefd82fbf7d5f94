# resume_optimizer/optimizer/__init__.py
"""
Deterministic fix-until-threshold optimizer
"""

from resume_optimizer.optimizer.models import ChangeType, RewriteChange, FullRewriteResult
from resume_optimizer.optimizer.fixes import FixContext, FixOutcome, FixStrategy, FIX_REGISTRY, get_fix
from resume_optimizer.optimizer.convergence import ConvergenceOptimizer, optimize_resume
from resume_optimizer.optimizer.dates import DateNormalizer, normalize_date_range

__all__ = [
    'ChangeType',
    'RewriteChange',
    'FullRewriteResult',
    'FixContext',
    'FixOutcome',
    'FixStrategy',
    'FIX_REGISTRY',
    'get_fix',
    'ConvergenceOptimizer',
    'optimize_resume',
    'DateNormalizer',
    'normalize_date_range',
]
