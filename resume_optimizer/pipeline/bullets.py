# resume_optimizer/pipeline/bullets.py
"""
Deterministic bullet formats.

Experience bullets follow Action + Context + Result; project bullets
follow Technology + Impact + Metrics.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from resume_optimizer.models import ResumeDocument, Project
from resume_optimizer.ats.vocabulary import METRIC_CLAUSES, has_metric, starts_with_strong_verb
from resume_optimizer.optimizer.fixes import strengthen_opening, format_bullet

MIN_CONTEXT_WORDS = 8
COMPLIANCE_TARGET = 0.8

IMPACT_PATTERN = re.compile(
    r'\b(?:improv|reduc|increas|achiev|deliver|enabl|sav|optimi|accelerat|boost|'
    r'cut|grew|grow|scal|serv|support|handl|streamlin|launch)\w*',
    re.IGNORECASE
)


def _strip_end(text: str) -> str:
    return text.strip().rstrip('.;,')


def _mentions(text: str, term: str) -> bool:
    return bool(re.search(r'(?<![\w+#.])' + re.escape(term.lower()) + r'(?![\w+#])', text.lower()))


def apply_action_context_result(bullet: str, position: int) -> str:
    """Rewrite an experience bullet as Action + Context + Result"""
    if not bullet.strip():
        return bullet
    text = strengthen_opening(bullet, position)
    if not has_metric(text):
        text = f"{_strip_end(text)}, {METRIC_CLAUSES[position % len(METRIC_CLAUSES)]}"
    return format_bullet(text)


def apply_tech_impact_metrics(bullet: str, project: Project, position: int) -> str:
    """Rewrite a project bullet as Technology + Impact + Metrics"""
    if not bullet.strip():
        return bullet
    text = strengthen_opening(bullet, position)
    tech = [t for t in project.tech_stack if t.strip()]
    if tech and not any(_mentions(text, t) for t in tech):
        text = f"{_strip_end(text)} using {' and '.join(tech[:2])}"
    if not has_metric(text):
        text = f"{_strip_end(text)}, {METRIC_CLAUSES[position % len(METRIC_CLAUSES)]}"
    return format_bullet(text)


def is_compliant_experience_bullet(bullet: str) -> bool:
    return (
        starts_with_strong_verb(bullet)
        and len(bullet.split()) >= MIN_CONTEXT_WORDS
        and (has_metric(bullet) or bool(IMPACT_PATTERN.search(bullet)))
    )


def is_compliant_project_bullet(bullet: str, project: Project) -> bool:
    mentions_tech = not project.tech_stack or any(_mentions(bullet, t) for t in project.tech_stack)
    return (
        mentions_tech
        and has_metric(bullet)
        and (starts_with_strong_verb(bullet) or bool(IMPACT_PATTERN.search(bullet)))
    )


@dataclass
class BulletCompliance:
    compliance_score: float
    compliant: int
    total: int
    issues: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)

    @property
    def format_compliance(self) -> bool:
        return self.compliance_score >= COMPLIANCE_TARGET

    def to_dict(self) -> Dict[str, Any]:
        return {
            'compliance_score': self.compliance_score,
            'compliant': self.compliant,
            'total': self.total,
            'format_compliance': self.format_compliance,
            'issues': list(self.issues),
            'strengths': list(self.strengths),
        }


def validate_bullet_formatting(resume: ResumeDocument) -> BulletCompliance:
    """Share of bullets that follow their section's format"""
    compliant = 0
    total = 0
    issues = []

    for i, exp in enumerate(resume.work_experience):
        for j, bullet in enumerate(exp.bullets):
            total += 1
            if is_compliant_experience_bullet(bullet):
                compliant += 1
            else:
                issues.append(f"Experience {i + 1}, bullet {j + 1}: missing action, context or result")

    for i, project in enumerate(resume.projects):
        for j, bullet in enumerate(project.bullets):
            total += 1
            if is_compliant_project_bullet(bullet, project):
                compliant += 1
            else:
                issues.append(f"Project {i + 1}, bullet {j + 1}: missing technology, impact or metric")

    score = round(compliant / total, 2) if total else 1.0
    strengths = []
    if total and compliant == total:
        strengths.append("All bullets follow the expected format")
    elif compliant:
        strengths.append(f"{compliant} of {total} bullets follow the expected format")

    return BulletCompliance(
        compliance_score=score,
        compliant=compliant,
        total=total,
        issues=issues,
        strengths=strengths,
    )
