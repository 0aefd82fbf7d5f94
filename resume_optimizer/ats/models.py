# resume_optimizer/ats/models.py
from dataclasses import dataclass, field
from typing import List, Dict, Tuple, Optional, Any
from enum import Enum


class KeywordCategory(Enum):
    """Vocabulary a JD keyword was matched from"""
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    DATABASE = "database"
    CLOUD = "cloud"
    DEVOPS = "devops"
    ARCHITECTURE = "architecture"
    DOMAIN = "domain"
    SOFT_SKILL = "soft_skill"


class Importance(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {'critical': 0, 'high': 1, 'medium': 2, 'low': 3}[self.value]


class Seniority(Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    PRINCIPAL = "principal"


@dataclass(frozen=True)
class RequirementKeyword:
    """Keyword found in a job description"""
    term: str                     # Canonical lowercase term, e.g. 'kubernetes'
    display: str                  # Display form, e.g. 'Kubernetes'
    category: KeywordCategory
    importance: Importance
    frequency: int = 1
    context: str = ""             # Snippet around first occurrence

    @property
    def is_soft_skill(self) -> bool:
        return self.category == KeywordCategory.SOFT_SKILL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'term': self.term,
            'display': self.display,
            'category': self.category.value,
            'importance': self.importance.value,
            'frequency': self.frequency,
        }


@dataclass(frozen=True)
class JobRequirementProfile:
    """
    Weighted requirements parsed from a JD.

    Immutable so cached instances can be shared between sessions.
    """
    role_title: str
    seniority: Seniority
    keywords: Tuple[RequirementKeyword, ...] = ()
    role_terms: Tuple[str, ...] = ()
    years_required: int = 0
    responsibilities: Tuple[str, ...] = ()

    @property
    def hard_skills(self) -> List[RequirementKeyword]:
        return [k for k in self.keywords if not k.is_soft_skill]

    @property
    def soft_skills(self) -> List[RequirementKeyword]:
        return [k for k in self.keywords if k.is_soft_skill]

    @property
    def is_technical(self) -> bool:
        return len(self.hard_skills) > 5

    def by_importance(self, importance: Importance) -> List[RequirementKeyword]:
        return [k for k in self.keywords if k.importance == importance]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'role_title': self.role_title,
            'seniority': self.seniority.value,
            'keywords': [k.to_dict() for k in self.keywords],
            'role_terms': list(self.role_terms),
            'years_required': self.years_required,
            'responsibilities': list(self.responsibilities),
        }


@dataclass(frozen=True)
class ParameterScore:
    """Score for one of the sixteen parameters"""
    id: int
    label: str
    score: float
    max_score: float
    recommendations: Tuple[str, ...] = ()

    @property
    def percentage(self) -> float:
        if self.max_score <= 0:
            return 100.0
        return round(max(0.0, min(100.0, self.score / self.max_score * 100)), 1)

    def passes(self, threshold: float) -> bool:
        return self.percentage >= threshold

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'score': round(self.score, 2),
            'max_score': self.max_score,
            'percentage': self.percentage,
            'recommendations': list(self.recommendations),
        }


@dataclass(frozen=True)
class ScoreReport:
    """All sixteen parameter scores plus the overall percentage"""
    parameters: Tuple[ParameterScore, ...]

    @property
    def total_score(self) -> float:
        return round(sum(p.score for p in self.parameters), 2)

    @property
    def total_max(self) -> float:
        return sum(p.max_score for p in self.parameters)

    @property
    def overall(self) -> float:
        if self.total_max <= 0:
            return 0.0
        return round(max(0.0, min(100.0, sum(p.score for p in self.parameters) / self.total_max * 100)), 1)

    @property
    def grade(self) -> str:
        """Letter grade"""
        if self.overall >= 90:
            return "A"
        elif self.overall >= 80:
            return "B"
        elif self.overall >= 70:
            return "C"
        elif self.overall >= 60:
            return "D"
        return "F"

    def get(self, parameter_id: int) -> Optional[ParameterScore]:
        for p in self.parameters:
            if p.id == parameter_id:
                return p
        return None

    def failing(self, threshold: float) -> List[ParameterScore]:
        return [p for p in self.parameters if not p.passes(threshold)]

    @property
    def recommendations(self) -> List[str]:
        return [r for p in self.parameters for r in p.recommendations]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall': self.overall,
            'grade': self.grade,
            'total_score': self.total_score,
            'total_max': self.total_max,
            'parameters': [p.to_dict() for p in self.parameters],
        }
