# resume_optimizer/optimizer/models.py
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from enum import Enum

from resume_optimizer.models import ResumeDocument
from resume_optimizer.ats.models import ScoreReport
from resume_optimizer.diagnostics import Diagnostics
from resume_optimizer.errors import ConvergenceIncomplete


class ChangeType(Enum):
    REWRITTEN = "rewritten"
    ADDED = "added"
    REMOVED = "removed"
    REORDERED = "reordered"
    ENHANCED = "enhanced"


@dataclass(frozen=True)
class RewriteChange:
    """One edit made to the resume"""
    section: str
    parameter: str
    change_type: ChangeType
    description: str
    before: str = ""
    after: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'section': self.section,
            'parameter': self.parameter,
            'change_type': self.change_type.value,
            'before': self.before,
            'after': self.after,
            'description': self.description,
        }


@dataclass
class FullRewriteResult:
    """Outcome of a convergence run"""
    rewritten_resume: ResumeDocument
    before_scores: ScoreReport
    after_scores: ScoreReport
    changes_applied: List[RewriteChange] = field(default_factory=list)
    processing_time: float = 0.0          # Seconds
    iterations: int = 0
    warnings: List[ConvergenceIncomplete] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    aborted: bool = False

    @property
    def overall_before(self) -> float:
        return self.before_scores.overall

    @property
    def overall_after(self) -> float:
        return self.after_scores.overall

    @property
    def improvement(self) -> float:
        return round(self.overall_after - self.overall_before, 1)

    @property
    def converged(self) -> bool:
        return not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rewritten_resume': self.rewritten_resume.to_dict(),
            'before_scores': self.before_scores.to_dict(),
            'after_scores': self.after_scores.to_dict(),
            'overall_before': self.overall_before,
            'overall_after': self.overall_after,
            'improvement': self.improvement,
            'changes_applied': [c.to_dict() for c in self.changes_applied],
            'processing_time': round(self.processing_time, 3),
            'iterations': self.iterations,
            'warnings': [w.to_dict() for w in self.warnings],
            'diagnostics': self.diagnostics.to_list(),
            'aborted': self.aborted,
        }
