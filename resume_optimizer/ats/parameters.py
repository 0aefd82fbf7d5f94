# resume_optimizer/ats/parameters.py
"""
The sixteen resume-quality parameters.

Each metric is a pure function ``(resume, profile) -> (points, recommendations)``
scored on its own native scale; the scorer rescales points to the
configured budget.
"""
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Tuple, Dict

from resume_optimizer.models import ResumeDocument
from resume_optimizer.ats.models import JobRequirementProfile
from resume_optimizer.ats.vocabulary import (
    STOP_WORDS, WORD_PATTERN, SENIORITY_TERMS, DEPTH_INDICATORS, VERSION_PATTERN,
    first_word, has_metric, starts_with_strong_verb,
)

MetricResult = Tuple[float, List[str]]


@dataclass(frozen=True)
class ParameterSpec:
    id: int
    label: str
    native_max: int
    metric: Callable[[ResumeDocument, JobRequirementProfile], MetricResult]


def _mentions(text_lower: str, term: str) -> bool:
    return term.lower() in text_lower


def _role_text(resume: ResumeDocument) -> str:
    roles = [resume.target_role] + [exp.role for exp in resume.work_experience]
    return " ".join(r for r in roles if r).lower()


def _words(text: str) -> List[str]:
    return re.findall(r'[a-z0-9]+', text.lower())


# 1
def score_contact_title(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    contact = resume.contact

    if '@' in contact.email:
        points += 3
    else:
        recs.append("Add a professional email address")
    if len(contact.phone_digits) >= 10:
        points += 2
    else:
        recs.append("Add a phone number with area code")
    if contact.linkedin:
        points += 2
    else:
        recs.append("Add your LinkedIn profile URL")

    title = (resume.target_role or (resume.work_experience[0].role if resume.work_experience else "")).lower()
    if title and (not profile.role_terms or any(_mentions(title, t) for t in profile.role_terms)):
        points += 3
    else:
        recs.append(f"Add a headline title aligned with the role, e.g. '{profile.role_title}'")

    return points, recs


# 2
def score_summary(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    summary = resume.summary.strip()
    summary_lower = summary.lower()

    if len(summary) > 50:
        points += 4
    else:
        recs.append("Write a 2-3 sentence professional summary")

    hard = [k.term for k in profile.hard_skills]
    if hard:
        matched = sum(1 for term in hard if _mentions(summary_lower, term))
        points += 3 * min(matched, 3) / min(len(hard), 3)
        if matched < min(len(hard), 3):
            recs.append("Mention top JD skills in the summary: " +
                        ", ".join(k.display for k in profile.hard_skills[:3]))
    elif summary:
        points += 3

    if re.search(r'\d', summary):
        points += 2
    else:
        recs.append("Include a quantified achievement or years of experience in the summary")

    if summary and (not profile.role_terms or any(_mentions(summary_lower, t) for t in profile.role_terms)):
        points += 1
    elif summary:
        recs.append("Reference the target role in the summary")

    return points, recs


# 3
def score_role_title_match(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    roles = _role_text(resume)

    if profile.role_terms:
        found = sum(1 for t in profile.role_terms if _mentions(roles, t))
        needed = min(len(profile.role_terms), 3)
        points += 6 * min(found, needed) / needed
        if found < needed:
            recs.append(f"Align job titles with the target role '{profile.role_title}'")
    elif roles:
        points += 6

    seniority_terms = SENIORITY_TERMS[profile.seniority.value]
    role_words = set(_words(roles))
    if any(term in role_words for term in seniority_terms):
        points += 4
    else:
        recs.append(f"Reflect {profile.seniority.value}-level seniority in your title")

    return points, recs


# 4
def score_hard_skills(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    hard = profile.hard_skills
    if not hard:
        return 15, []

    skills = resume.skill_set
    text = resume.full_text().lower()
    missing = [k for k in hard if k.term not in skills and not _mentions(text, k.term)]
    matched = len(hard) - len(missing)

    recs = []
    if missing:
        missing.sort(key=lambda k: k.importance.rank)
        recs.append("Add missing skills: " + ", ".join(k.display for k in missing[:8]))
    return 15 * matched / len(hard), recs


# 5
def score_soft_skills(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    soft = profile.soft_skills
    if not soft:
        return 8, []

    text = resume.full_text().lower()
    missing = [k for k in soft if not _mentions(text, k.term)]
    recs = []
    if missing:
        recs.append("Demonstrate soft skills: " + ", ".join(k.display for k in missing))
    return 8 * (len(soft) - len(missing)) / len(soft), recs


# 6
def score_section_order(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    technical = profile.is_technical

    if resume.contact.name or resume.contact.email:
        points += 2
    else:
        recs.append("Start with a contact header")
    if resume.summary.strip():
        points += 2
    else:
        recs.append("Add a summary right after the contact header")
    if resume.all_skills:
        points += 3 if technical else 2
    else:
        recs.append("Add a skills section near the top")
    if resume.work_experience:
        points += 3
    else:
        recs.append("Add a work experience section")
    if resume.projects:
        points += 1
    else:
        recs.append("Add a projects section")
    if resume.education:
        points += 1 if technical else 2
    else:
        recs.append("Add an education section")

    return points, recs


# 7
def score_word_variety(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    bullets = resume.all_bullets
    if not bullets:
        return 10, []

    counts = Counter(
        w for b in bullets for w in WORD_PATTERN.findall(b.lower())
        if len(w) > 2 and w not in STOP_WORDS
    )
    overused = sorted(w for w, c in counts.items() if c > 3)

    starters = Counter(first_word(b).lower() for b in bullets if len(first_word(b)) > 2)
    repeated_starts = sorted(w for w, c in starters.items() if c > 2)

    points = max(2, 10 - len(overused) - len(repeated_starts))
    recs = []
    if overused:
        recs.append("Vary overused words: " + ", ".join(overused[:6]))
    if repeated_starts:
        recs.append("Avoid starting several bullets with: " + ", ".join(repeated_starts))
    return points, recs


# 8
def score_quantified_results(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    bullets = resume.all_bullets
    if not bullets:
        return 0, ["Add bullets with measurable results"]
    quantified = sum(1 for b in bullets if has_metric(b))
    recs = []
    if quantified < len(bullets):
        recs.append(f"Quantify {len(bullets) - quantified} more bullet(s) with numbers, %, or $")
    return 10 * quantified / len(bullets), recs


# 9
def score_action_verbs(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    bullets = resume.all_bullets
    if not bullets:
        return 0, ["Add bullets that start with strong action verbs"]
    strong = sum(1 for b in bullets if starts_with_strong_verb(b))
    recs = []
    if strong < len(bullets):
        recs.append(f"Start {len(bullets) - strong} more bullet(s) with a strong action verb")
    return 8 * strong / len(bullets), recs


# 10
def score_keyword_density(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    if not profile.keywords:
        return 10, []
    text = resume.full_text().lower()
    present = sum(1 for k in profile.keywords if _mentions(text, k.term))
    coverage = present / len(profile.keywords) * 100

    if coverage >= 90:
        points = 10
    elif coverage >= 70:
        points = 8
    elif coverage >= 50:
        points = 6
    elif coverage >= 30:
        points = 4
    else:
        points = 2

    recs = []
    if coverage < 90:
        recs.append(f"JD keyword coverage is {coverage:.0f}%; aim for 90%+")
    return points, recs


# 11
def score_formatting(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    bullets = resume.all_bullets
    recs = []
    if not bullets:
        if resume.work_experience or resume.projects:
            return 5, ["Describe each role and project with bullet points"]
        return 0, ["Add experience or projects described with bullet points"]

    total = len(bullets)
    good_length = sum(1 for b in bullets if 5 <= len(b.split()) <= 50)
    capitalized = sum(1 for b in bullets if b.strip()[:1].isupper())
    punctuated = sum(1 for b in bullets if re.search(r'[.!?]$', b.strip()))

    points = 3 * good_length / total + 2 * capitalized / total + 2 * punctuated / total
    if good_length < total:
        recs.append("Keep bullets between 5 and 50 words")
    if capitalized < total:
        recs.append("Start every bullet with a capital letter")
    if punctuated < total:
        recs.append("End bullets with consistent punctuation")

    for present, name in ((resume.work_experience, 'experience'),
                          (resume.all_skills, 'skills'),
                          (resume.education, 'education')):
        if present:
            points += 1
        else:
            recs.append(f"Add a clearly headed {name} section")

    return min(points, 10), recs


# 12
def score_section_completeness(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    if resume.work_experience:
        points += 2
    else:
        recs.append("Add work experience (internships and freelance work count)")
    if resume.projects:
        points += 2
    else:
        recs.append("Add 2-3 projects relevant to the role")
    if resume.education:
        points += 1
    else:
        recs.append("Add your education")
    if resume.all_skills:
        points += 2
    else:
        recs.append("Add a categorized skills section")
    if resume.contact.email and resume.contact.phone:
        points += 1
    else:
        recs.append("Include both email and phone")
    return points, recs


# 13
def score_chronology(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    points = 0.0
    recs = []
    if resume.work_experience:
        dated = sum(1 for exp in resume.work_experience if exp.year.strip())
        if dated == len(resume.work_experience):
            points += 3
        elif dated:
            points += 1
            recs.append("Add dates to every experience entry")
        else:
            recs.append("Add date ranges to experience entries")
    else:
        recs.append("Add dated work experience")

    if any(edu.year.strip() for edu in resume.education):
        points += 2
    else:
        recs.append("Add graduation dates to education")
    return points, recs


# 14
def score_relevance(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    hard = [k.term for k in profile.hard_skills]
    roles = list(profile.role_terms)
    text = resume.full_text().lower()

    if not hard and not roles:
        return 5, []

    has_skill = any(_mentions(text, t) for t in hard)
    has_role = any(_mentions(text, t) for t in roles)

    if not resume.work_experience:
        recs = ["Add experience entries that show relevant work"]
        if (has_skill or not hard) and (has_role or not roles):
            return 5, recs
        if has_skill or has_role:
            return 3, recs
        return 1, recs

    relevant = 0
    for exp in resume.work_experience:
        exp_text = " ".join([exp.role] + exp.bullets).lower()
        company = exp.company.lower()
        if (any(_mentions(exp_text, t) for t in hard)
                or any(_mentions(exp_text, t) for t in roles)
                or any(_mentions(company, t) for t in roles)):
            relevant += 1

    ratio = relevant / len(resume.work_experience)
    if ratio >= 0.8:
        points = 5
    elif ratio >= 0.5:
        points = 4
    elif ratio >= 0.3:
        points = 3
    elif ratio > 0:
        points = 2
    else:
        points = 2 if (has_skill or has_role) else 1

    recs = []
    if ratio < 0.8:
        recs.append("Lead with experience that uses the JD's skills; trim unrelated detail")
    return points, recs


# 15
def score_tools_versions(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    matches = VERSION_PATTERN.findall(resume.full_text())
    if len(matches) >= 3:
        return 5, []
    if matches:
        return 3, ["Specify versions for more key tools (e.g. Python 3.11, React 18)"]
    return 1, ["Mention tool versions (e.g. Java 17, PostgreSQL 15)"]


# 16
def score_project_depth(resume: ResumeDocument, profile: JobRequirementProfile) -> MetricResult:
    if not resume.projects:
        return 0, ["Add projects with technical depth and complexity"]

    hard = [k.term for k in profile.hard_skills]
    total = 0
    for project in resume.projects:
        text = project.text.lower()
        depth = sum(
            1 for indicators in DEPTH_INDICATORS.values()
            if any(ind in text for ind in indicators)
        )
        if len(project.tech_stack) >= 3:
            depth += 1
        if len(project.tech_stack) >= 5:
            depth += 1
        if sum(1 for t in hard if t in text) >= 2:
            depth += 1
        total += min(depth, 3)

    avg = total / len(resume.projects)
    points = min(round(avg * 2.5), 7)

    recs = []
    if points < 4:
        recs.append("Add technical details to projects (architecture, tech stack, complexity)")
    if points < 6:
        recs.append("Describe system design decisions and technical challenges solved")
    return points, recs


PARAMETERS: List[ParameterSpec] = [
    ParameterSpec(1, "Contact & Title", 10, score_contact_title),
    ParameterSpec(2, "Summary / Objective", 10, score_summary),
    ParameterSpec(3, "Role Title Match", 10, score_role_title_match),
    ParameterSpec(4, "Hard Skills Match", 15, score_hard_skills),
    ParameterSpec(5, "Soft Skills Match", 8, score_soft_skills),
    ParameterSpec(6, "Section Order", 12, score_section_order),
    ParameterSpec(7, "Word Variety", 10, score_word_variety),
    ParameterSpec(8, "Quantified Results", 10, score_quantified_results),
    ParameterSpec(9, "Action Verbs & Impact", 8, score_action_verbs),
    ParameterSpec(10, "Keyword Density", 10, score_keyword_density),
    ParameterSpec(11, "Formatting & Readability", 10, score_formatting),
    ParameterSpec(12, "Section Completeness", 8, score_section_completeness),
    ParameterSpec(13, "Chronology & Dates", 5, score_chronology),
    ParameterSpec(14, "Relevance Filtering", 5, score_relevance),
    ParameterSpec(15, "Tools & Versions", 5, score_tools_versions),
    ParameterSpec(16, "Project Technical Depth", 7, score_project_depth),
]

PARAMETERS_BY_ID: Dict[int, ParameterSpec] = {p.id: p for p in PARAMETERS}
