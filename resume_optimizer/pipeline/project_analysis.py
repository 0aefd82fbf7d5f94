# resume_optimizer/pipeline/project_analysis.py
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from nltk.stem import PorterStemmer
from rapidfuzz import fuzz, process

from resume_optimizer.models import ResumeDocument, Project
from resume_optimizer.ats.models import JobRequirementProfile
from resume_optimizer.ai.client import GenerativeClient
from resume_optimizer.errors import ExternalServiceError
from resume_optimizer.pipeline.validation import ProjectInput, ProjectModificationsInput

logger = logging.getLogger(__name__)

# Matched terms needed for a full alignment score
ALIGNMENT_TARGET = 8
SUITABILITY_THRESHOLD = 0.3
NEUTRAL_ALIGNMENT = 0.5
TITLE_MATCH_CUTOFF = 85

TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9+#.]*")

_stemmer = PorterStemmer()


def _stems(text: str) -> List[str]:
    return [_stemmer.stem(token.strip('.')) for token in TOKEN_PATTERN.findall(text.lower())]


@dataclass
class ProjectAssessment:
    title: str
    suitable: bool
    alignment_score: float
    matched_keywords: List[str] = field(default_factory=list)
    reason: str = ""
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'suitable': self.suitable,
            'alignment_score': self.alignment_score,
            'matched_keywords': list(self.matched_keywords),
            'reason': self.reason,
            'suggestion': self.suggestion,
        }


@dataclass
class ProjectAnalysis:
    """Per-project suitability plus suggested replacements"""
    assessments: List[ProjectAssessment] = field(default_factory=list)
    suggested_projects: List[Dict[str, Any]] = field(default_factory=list)
    fallback: bool = False

    @property
    def suitable_count(self) -> int:
        return sum(1 for a in self.assessments if a.suitable)

    @property
    def alignment_scores(self) -> List[float]:
        return [a.alignment_score for a in self.assessments]

    @property
    def suggestions(self) -> List[str]:
        return [a.suggestion for a in self.assessments if a.suggestion]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'projects': [a.to_dict() for a in self.assessments],
            'suitable_projects': self.suitable_count,
            'unsuitable_projects': len(self.assessments) - self.suitable_count,
            'alignment_scores': self.alignment_scores,
            'suggestions': self.suggestions,
            'suggested_projects': list(self.suggested_projects),
            'fallback': self.fallback,
        }


def _profile_terms(profile: JobRequirementProfile) -> List[str]:
    terms = [k.display for k in profile.keywords if not k.is_soft_skill]
    terms += [t for t in profile.role_terms if t.lower() not in {x.lower() for x in terms}]
    return terms


def alignment_score(project: Project, profile: JobRequirementProfile) -> Tuple[float, List[str]]:
    """
    Normalized overlap between a project and the job requirements.

    Both sides are stemmed so 'deployed'/'deployment' and
    'containers'/'container' match. A multi-word term matches when all
    of its stems appear in the project text.

    Returns:
        (score in [0, 1] rounded to 2 decimals, matched terms)
    """
    terms = _profile_terms(profile)
    if not terms:
        return NEUTRAL_ALIGNMENT, []

    project_stems = set(_stems(project.text))
    matched = []
    for term in terms:
        stems = _stems(term)
        if stems and all(s in project_stems for s in stems):
            matched.append(term)

    score = min(len(matched) / min(len(terms), ALIGNMENT_TARGET), 1.0)
    return round(score, 2), matched


def alignment_scores(projects: List[Project], profile: JobRequirementProfile) -> List[Dict[str, Any]]:
    results = []
    for project in projects:
        score, matched = alignment_score(project, profile)
        results.append({
            'title': project.title,
            'alignment_score': score,
            'matching_keywords': matched[:10],
        })
    return results


class ProjectAnalyzer:
    """
    Judge how well each project fits the target job.

    Suitability is deterministic (alignment threshold). When a generative
    client is supplied its per-project verdicts are merged index by index;
    any provider failure keeps the deterministic verdicts.
    """

    def __init__(self, client: Optional[GenerativeClient] = None, threshold: float = SUITABILITY_THRESHOLD):
        self.client = client
        self.threshold = threshold

    def analyze(self, resume: ResumeDocument, profile: JobRequirementProfile) -> ProjectAnalysis:
        logger.info(f"Analyzing {len(resume.projects)} projects for alignment")
        resume_text = resume.full_text().lower()
        missing_tech = [k.display for k in profile.hard_skills if k.term not in resume_text][:3]

        assessments = []
        for project in resume.projects:
            score, matched = alignment_score(project, profile)
            suitable = score >= self.threshold and any(b.strip() for b in project.bullets)
            if suitable:
                reason = f"Covers {len(matched)} job requirement(s)"
                suggestion = ""
            else:
                reason = "Low overlap with the job requirements" if project.bullets else "Project has no bullets"
                tech = ", ".join(missing_tech) or ", ".join(matched) or profile.role_title
                suggestion = f"Replace '{project.title}' with a project that uses {tech}"
            assessments.append(ProjectAssessment(
                title=project.title,
                suitable=suitable,
                alignment_score=score,
                matched_keywords=matched[:10],
                reason=reason,
                suggestion=suggestion,
            ))

        analysis = ProjectAnalysis(assessments=assessments)
        if self.client is not None and assessments:
            self._merge_generative(analysis, resume, profile)

        unsuitable = len(assessments) - analysis.suitable_count
        wanted = max(unsuitable, 2 - len(assessments), 0)
        analysis.suggested_projects = suggest_projects(profile, wanted)

        logger.info(
            f"✓ Project analysis: {analysis.suitable_count} suitable, "
            f"{unsuitable} need replacement"
        )
        return analysis

    def _merge_generative(self, analysis: ProjectAnalysis, resume: ResumeDocument, profile: JobRequirementProfile):
        projects = "\n".join(
            f"{i + 1}. {p.title}: {' '.join(p.bullets)[:300]}" for i, p in enumerate(resume.projects)
        )
        prompt = (
            f"Target role: {profile.role_title}\n"
            f"Key requirements: {', '.join(k.display for k in profile.keywords[:10])}\n\n"
            f"Projects:\n{projects}\n\n"
            "For each project return an object {\"suitable\": true/false, \"reason\": \"...\"}. "
            "Return ONLY a JSON array in the same order."
        )
        try:
            verdicts = self.client.generate_json(prompt)
        except ExternalServiceError as e:
            logger.warning(f"Project suitability fallback to deterministic analysis: {e}")
            analysis.fallback = True
            return

        if not isinstance(verdicts, list):
            analysis.fallback = True
            return
        for assessment, verdict in zip(analysis.assessments, verdicts):
            if isinstance(verdict, dict) and isinstance(verdict.get('suitable'), bool):
                assessment.suitable = verdict['suitable']
                if isinstance(verdict.get('reason'), str) and verdict['reason'].strip():
                    assessment.reason = verdict['reason'].strip()


def suggest_projects(profile: JobRequirementProfile, count: int) -> List[Dict[str, Any]]:
    """Deterministic project ideas built from the top hard skills"""
    if count <= 0:
        return []
    skills = [k.display for k in profile.hard_skills]
    if not skills:
        return []
    suggestions = []
    for i in range(count):
        tech = [skills[(i * 3 + j) % len(skills)] for j in range(min(3, len(skills)))]
        tech = list(dict.fromkeys(tech))
        suggestions.append({
            'title': f"{profile.role_title} Project: {' + '.join(tech)}",
            'tech_stack': tech,
            'reason': f"Demonstrates {', '.join(tech)} required for {profile.role_title}",
        })
    return suggestions


def _to_project(data: ProjectInput) -> Project:
    return Project(
        title=data.title.strip(),
        description=data.description.strip(),
        bullets=[b.strip() for b in data.bullets if b.strip()],
        tech_stack=[t.strip() for t in data.tech_stack if t.strip()],
    )


def find_project_index(projects: List[Project], title: str) -> Optional[int]:
    """Exact (case-insensitive) title match first, then closest fuzzy match"""
    wanted = title.strip().lower()
    for i, project in enumerate(projects):
        if project.title.strip().lower() == wanted:
            return i
    if not projects or not wanted:
        return None
    match = process.extractOne(
        wanted,
        [p.title.lower() for p in projects],
        scorer=fuzz.ratio,
        score_cutoff=TITLE_MATCH_CUTOFF,
    )
    return match[2] if match else None


def apply_project_modifications(
    resume: ResumeDocument,
    modifications: ProjectModificationsInput
) -> Tuple[ResumeDocument, List[str]]:
    """
    Apply user project decisions to a copy of the resume.

    Order: removals, additions, replacements (matched by original
    title, appended when no match is found), then edits of existing
    projects matched by title.

    Returns:
        (updated copy, change descriptions)
    """
    updated = resume.copy()
    projects = updated.projects
    changes = []

    removed = []
    for title in modifications.removed_project_titles:
        index = find_project_index(projects, title)
        if index is not None:
            removed.append(projects.pop(index).title)
    if removed:
        changes.append(f"Removed {len(removed)} project(s): {', '.join(removed)}")

    for data in modifications.added_projects:
        projects.append(_to_project(data))
        changes.append(f"Added project: {data.title.strip()}")

    for data in modifications.replaced_projects:
        index = find_project_index(projects, data.original_title)
        if index is None:
            projects.append(_to_project(data))
            changes.append(f"Added project: {data.title.strip()} (no project named '{data.original_title}')")
        else:
            old_title = projects[index].title
            projects[index] = _to_project(data)
            changes.append(f"Replaced project '{old_title}' with '{data.title.strip()}'")

    for data in modifications.modified_projects:
        index = find_project_index(projects, data.title)
        if index is None:
            logger.warning(f"Modified project not found: {data.title}")
            continue
        existing = projects[index]
        new_project = _to_project(data)
        projects[index] = Project(
            title=new_project.title or existing.title,
            description=new_project.description or existing.description,
            bullets=new_project.bullets or existing.bullets,
            tech_stack=new_project.tech_stack or existing.tech_stack,
        )
        changes.append(f"Modified project: {existing.title}")

    if not changes:
        changes.append("Kept existing projects")
    return updated, changes
