# resume_optimizer/optimizer/fixes.py
"""
Deterministic fix strategies, one per scoring parameter.

Every strategy is copy-on-write: it returns the input document untouched
when there is nothing to do, or a modified deep copy plus the list of
changes made. Strategies inspect current state before acting, so running
one against a document that already satisfies its parameter is a no-op.
"""
import re
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from resume_optimizer.models import ResumeDocument, SkillCategory
from resume_optimizer.ats.models import JobRequirementProfile, KeywordCategory, RequirementKeyword, Seniority
from resume_optimizer.ats.parameters import PARAMETERS_BY_ID
from resume_optimizer.ats.taxonomy import SkillCategories, categorize_skill
from resume_optimizer.ats.vocabulary import (
    IMPACT_VERBS, STRONG_VERBS, WEAK_OPENERS, SYNONYMS, STOP_WORDS, WORD_PATTERN,
    SENIORITY_TERMS, DEPTH_INDICATORS, METRIC_CLAUSES, first_word, has_metric,
    starts_with_strong_verb,
)
from resume_optimizer.optimizer.dates import DateNormalizer
from resume_optimizer.optimizer.models import RewriteChange, ChangeType

logger = logging.getLogger(__name__)


@dataclass
class FixContext:
    profile: JobRequirementProfile
    target_role: Optional[str] = None


@dataclass
class FixOutcome:
    resume: ResumeDocument
    changes: List[RewriteChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


FixFunction = Callable[[ResumeDocument, FixContext], FixOutcome]


@dataclass(frozen=True)
class FixStrategy:
    parameter_id: int
    name: str
    apply: FixFunction

    @property
    def label(self) -> str:
        return PARAMETERS_BY_ID[self.parameter_id].label

    def run(self, resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
        """Apply the fix unless its parameter already scores full marks"""
        spec = PARAMETERS_BY_ID[self.parameter_id]
        points, _ = spec.metric(resume, ctx.profile)
        if points >= spec.native_max:
            logger.debug(f"Fix {self.parameter_id} skipped: parameter already at full marks")
            return FixOutcome(resume)
        return self.apply(resume, ctx)


FIX_REGISTRY: Dict[int, FixStrategy] = {}


def register_fix(parameter_id: int, name: str):
    """Register a fix strategy for a parameter id"""
    def decorator(func: FixFunction) -> FixFunction:
        FIX_REGISTRY[parameter_id] = FixStrategy(parameter_id, name, func)
        return func
    return decorator


def get_fix(parameter_id: int) -> Optional[FixStrategy]:
    return FIX_REGISTRY.get(parameter_id)


# Keyword insertion runs before the text rewrites so missing terms land in
# the skills section before the summary mentions them
APPLY_ORDER = [4, 5, 10, 1, 2, 3, 6, 7, 8, 9, 11, 12, 13, 14, 15, 16]


def apply_rank(parameter_id: int) -> int:
    if parameter_id in APPLY_ORDER:
        return APPLY_ORDER.index(parameter_id)
    return len(APPLY_ORDER) + parameter_id


def _label(parameter_id: int) -> str:
    return PARAMETERS_BY_ID[parameter_id].label


KEYWORD_CATEGORY_FALLBACK = {
    KeywordCategory.LANGUAGE: SkillCategories.PROGRAMMING_LANGUAGES,
    KeywordCategory.FRAMEWORK: SkillCategories.BACKEND,
    KeywordCategory.DATABASE: SkillCategories.DATABASES,
    KeywordCategory.CLOUD: SkillCategories.CLOUD_DEVOPS,
    KeywordCategory.DEVOPS: SkillCategories.CLOUD_DEVOPS,
    KeywordCategory.ARCHITECTURE: SkillCategories.BACKEND,
    KeywordCategory.DOMAIN: SkillCategories.TOOLS_PLATFORMS,
    KeywordCategory.SOFT_SKILL: SkillCategories.SOFT_SKILLS,
}

SENIORITY_DESCRIPTORS = {
    Seniority.ENTRY: 'Motivated',
    Seniority.MID: 'Results-driven',
    Seniority.SENIOR: 'Seasoned',
    Seniority.LEAD: 'Strategic',
    Seniority.PRINCIPAL: 'Visionary',
}

SENIORITY_PREFIXES = {
    Seniority.ENTRY: 'Junior',
    Seniority.SENIOR: 'Senior',
    Seniority.LEAD: 'Lead',
    Seniority.PRINCIPAL: 'Principal',
}

TITLE_ENHANCEMENTS = {
    'web developer': 'Full Stack Developer',
    'frontend developer': 'Frontend Engineer',
    'backend developer': 'Backend Engineer',
    'programmer': 'Software Developer',
    'coder': 'Software Engineer',
    'developer': 'Software Engineer',
    'intern': 'Software Engineering Intern',
}

POWER_VERBS = ['Delivered', 'Engineered', 'Spearheaded', 'Optimized',
               'Implemented', 'Streamlined', 'Developed', 'Led']

# Bullets are written without a subject
LEADING_PRONOUN = re.compile(r'^(?:i|we|they|he|she|you)\s+(?=\S)', re.IGNORECASE)

TOOL_VERSIONS = {
    'react': 'React 18',
    'node.js': 'Node.js 20',
    'node': 'Node.js 20',
    'typescript': 'TypeScript 5.4',
    'python': 'Python 3.11',
    'java': 'Java 17',
    'angular': 'Angular 17',
    'vue': 'Vue 3',
    'next.js': 'Next.js 14',
    'postgresql': 'PostgreSQL 15',
    'mongodb': 'MongoDB 7.0',
    'redis': 'Redis 7.2',
    'django': 'Django 4.2',
    'spring boot': 'Spring Boot 3.2',
}

DEPTH_ENHANCEMENTS = [
    'implementing scalable architecture',
    'with distributed system design',
    'using microservices pattern',
    'with real-time data processing',
    'implementing caching strategies',
    'with comprehensive test coverage',
    'following clean architecture principles',
    'with CI/CD pipeline integration',
]

PLACEHOLDER_BULLETS = [
    'Developed and maintained software solutions for {company}.',
    'Collaborated with cross-functional teams to deliver high-quality products.',
    'Implemented best practices and contributed to code reviews.',
]

SHORT_BULLET_PAD = 'demonstrating strong technical expertise'


# --------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------

def preferred_title(profile: JobRequirementProfile, explicit: Optional[str] = None) -> str:
    """Target title carrying the profile's seniority"""
    title = (explicit or profile.role_title or 'Software Engineer').strip()
    prefix = SENIORITY_PREFIXES.get(profile.seniority)
    words = set(re.findall(r'[a-z]+', title.lower()))
    if prefix and not words & set(SENIORITY_TERMS[profile.seniority.value]):
        title = f"{prefix} {title}"
    return title


def _skill_category_for(keyword: RequirementKeyword) -> str:
    return categorize_skill(keyword.term) or KEYWORD_CATEGORY_FALLBACK.get(
        keyword.category, SkillCategories.TOOLS_PLATFORMS
    )


def _add_skills(doc: ResumeDocument, keywords: List[RequirementKeyword], parameter_id: int) -> List[RewriteChange]:
    """Insert keywords into their taxonomy category, creating it if needed"""
    changes = []
    for keyword in keywords:
        category_name = _skill_category_for(keyword)
        category = doc.find_category(category_name)
        if category is None:
            category = SkillCategory(category_name, [])
            doc.skills.append(category)
        if category.add(keyword.display):
            changes.append(RewriteChange(
                section='skills',
                parameter=_label(parameter_id),
                change_type=ChangeType.ADDED,
                after=keyword.display,
                description=f"Added JD skill '{keyword.display}' to {category_name}",
            ))
    return changes


def _missing_keywords(resume: ResumeDocument, keywords: List[RequirementKeyword]) -> List[RequirementKeyword]:
    skills = resume.skill_set
    text = resume.full_text().lower()
    return [k for k in keywords if k.term not in skills and k.term not in text]


def _strip_end(text: str) -> str:
    return re.sub(r'[.!?;,\s]+$', '', text.strip())


def _build_summary(resume: ResumeDocument, ctx: FixContext) -> str:
    profile = ctx.profile
    role = preferred_title(profile, ctx.target_role or resume.target_role or None)
    years = max(len(resume.work_experience), profile.years_required, 1)
    top_skills = ", ".join(k.display for k in profile.hard_skills[:5]) or "modern software development"
    soft = profile.soft_skills[0].display.lower() if profile.soft_skills else "collaboration"
    descriptor = SENIORITY_DESCRIPTORS[profile.seniority]
    return (
        f"{descriptor} {role} with {years}+ years of experience specializing in {top_skills}. "
        f"Proven track record of delivering scalable solutions, improving system performance by 40%+, "
        f"and driving {soft} across cross-functional teams."
    )


def _summary_is_strong(resume: ResumeDocument, profile: JobRequirementProfile) -> bool:
    summary = resume.summary.lower()
    hard = [k.term for k in profile.hard_skills]
    needed = min(len(hard), 3)
    return (
        len(resume.summary.strip()) > 50
        and bool(re.search(r'\d', summary))
        and sum(1 for t in hard if t in summary) >= needed
        and (not profile.role_terms or any(t in summary for t in profile.role_terms))
    )


# --------------------------------------------------------------------------
# Strategies
# --------------------------------------------------------------------------

@register_fix(1, "set target role")
def fix_contact_title(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    first_role = resume.work_experience[0].role if resume.work_experience else ""
    current = (resume.target_role or first_role).strip().lower()
    terms = ctx.profile.role_terms
    if current and (not terms or any(t in current for t in terms)):
        return FixOutcome(resume)

    doc = resume.copy()
    doc.target_role = preferred_title(ctx.profile, ctx.target_role)
    return FixOutcome(doc, [RewriteChange(
        section='header',
        parameter=_label(1),
        change_type=ChangeType.REWRITTEN if resume.target_role else ChangeType.ADDED,
        before=resume.target_role,
        after=doc.target_role,
        description=f"Set target role to '{doc.target_role}'",
    )])


@register_fix(2, "rewrite summary")
def fix_summary(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    if _summary_is_strong(resume, ctx.profile):
        return FixOutcome(resume)

    new_summary = _build_summary(resume, ctx)
    if new_summary == resume.summary:
        return FixOutcome(resume)

    doc = resume.copy()
    doc.summary = new_summary
    return FixOutcome(doc, [RewriteChange(
        section='summary',
        parameter=_label(2),
        change_type=ChangeType.REWRITTEN if resume.summary else ChangeType.ADDED,
        before=resume.summary,
        after=new_summary,
        description="Rewrote summary with JD-aligned keywords and metrics",
    )])


@register_fix(3, "align role titles")
def fix_role_titles(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []

    for index, exp in enumerate(doc.work_experience):
        role_lower = exp.role.lower()
        if not role_lower or 'engineer' in role_lower:
            continue
        for generic, enhanced in TITLE_ENHANCEMENTS.items():
            if re.search(rf'\b{re.escape(generic)}\b', role_lower):
                before = exp.role
                exp.role = re.sub(rf'\b{re.escape(generic)}\b', enhanced, exp.role, count=1, flags=re.IGNORECASE)
                changes.append(RewriteChange(
                    section='experience',
                    parameter=_label(3),
                    change_type=ChangeType.ENHANCED,
                    before=before,
                    after=exp.role,
                    description=f"Enhanced role title at position {index + 1}",
                ))
                break

    title = preferred_title(ctx.profile, ctx.target_role)
    if doc.target_role != title:
        roles = " ".join([doc.target_role] + [e.role for e in doc.work_experience]).lower()
        words = set(re.findall(r'[a-z]+', roles))
        terms = ctx.profile.role_terms
        needed = min(len(terms), 3)
        covered = sum(1 for t in terms if t in roles) >= needed
        seniority_ok = bool(words & set(SENIORITY_TERMS[ctx.profile.seniority.value]))
        if not covered or not seniority_ok:
            before = doc.target_role
            doc.target_role = title
            changes.append(RewriteChange(
                section='header',
                parameter=_label(3),
                change_type=ChangeType.REWRITTEN if before else ChangeType.ADDED,
                before=before,
                after=title,
                description=f"Aligned headline title with '{title}'",
            ))

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(4, "add hard skills")
def fix_hard_skills(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    missing = _missing_keywords(resume, ctx.profile.hard_skills)
    if not missing:
        return FixOutcome(resume)
    doc = resume.copy()
    changes = _add_skills(doc, missing, 4)
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(5, "add soft skills")
def fix_soft_skills(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    missing = _missing_keywords(resume, ctx.profile.soft_skills)
    if not missing:
        return FixOutcome(resume)
    doc = resume.copy()
    changes = _add_skills(doc, missing, 5)
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(6, "complete leading sections")
def fix_section_order(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    needs_summary = not resume.summary.strip()
    needs_skills = not resume.all_skills and bool(ctx.profile.hard_skills)
    if not needs_summary and not needs_skills:
        return FixOutcome(resume)

    doc = resume.copy()
    changes = []
    if needs_summary:
        doc.summary = _build_summary(doc, ctx)
        changes.append(RewriteChange(
            section='summary',
            parameter=_label(6),
            change_type=ChangeType.ADDED,
            after=doc.summary,
            description="Added summary section",
        ))
    if needs_skills:
        added = _add_skills(doc, ctx.profile.hard_skills, 6)
        if added:
            changes.append(RewriteChange(
                section='skills',
                parameter=_label(6),
                change_type=ChangeType.ADDED,
                after=", ".join(c.after for c in added),
                description=f"Created skills section with {len(added)} JD skills",
            ))
    return FixOutcome(doc, changes)


def _match_case(template: str, replacement: str) -> str:
    if template[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


@register_fix(7, "vary repeated words")
def fix_word_variety(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    locations = list(resume.iter_bullets())
    if not locations:
        return FixOutcome(resume)

    counts = Counter(
        w for _, _, _, b in locations for w in WORD_PATTERN.findall(b.lower())
        if len(w) > 2 and w not in STOP_WORDS
    )
    overused = {w for w, c in counts.items() if c > 3 and w in SYNONYMS}

    starters = Counter(first_word(b).lower() for _, _, _, b in locations if len(first_word(b)) > 2)
    repeated_starts = {w for w, c in starters.items() if c > 2}

    if not overused and not repeated_starts:
        return FixOutcome(resume)

    doc = resume.copy()
    changes = []
    seen: Counter = Counter()
    seen_starts: Counter = Counter()
    used_starts = Counter(starters)

    for section, i, j, bullet in locations:
        new_bullet = bullet

        start = first_word(new_bullet).lower()
        if start in repeated_starts:
            seen_starts[start] += 1
            if seen_starts[start] > 2:
                group = next((g for g in IMPACT_VERBS.values() if start in {v.lower() for v in g}), POWER_VERBS)
                options = [v for v in group if v.lower() != start and used_starts[v.lower()] < 2]
                if options:
                    choice = options[(i + j) % len(options)]
                    new_bullet = re.sub(r'^\s*\S+', choice, new_bullet, count=1)
                    used_starts[start] -= 1
                    used_starts[choice.lower()] += 1

        def replace(match):
            word = match.group(0)
            key = word.lower()
            seen[key] += 1
            if seen[key] <= 2:
                return word
            candidates = SYNONYMS[key]
            if match.start() == 0:
                candidates = [c for c in candidates if c in STRONG_VERBS]
                if not candidates:
                    return word
            return _match_case(word, candidates[(seen[key] - 3) % len(candidates)])

        if overused:
            pattern = r'\b(' + '|'.join(re.escape(w) for w in sorted(overused)) + r')\b'
            new_bullet = re.sub(pattern, replace, new_bullet, flags=re.IGNORECASE)

        if new_bullet != bullet:
            doc.set_bullet(section, i, j, new_bullet)
            changes.append(RewriteChange(
                section=section,
                parameter=_label(7),
                change_type=ChangeType.REWRITTEN,
                before=bullet,
                after=new_bullet,
                description="Replaced repeated wording with synonyms",
            ))

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(8, "add metrics")
def fix_quantified_results(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []
    for position, (section, i, j, bullet) in enumerate(resume.iter_bullets()):
        if not bullet.strip() or has_metric(bullet):
            continue
        clause = METRIC_CLAUSES[position % len(METRIC_CLAUSES)]
        new_bullet = f"{_strip_end(bullet)}, {clause}."
        doc.set_bullet(section, i, j, new_bullet)
        changes.append(RewriteChange(
            section=section,
            parameter=_label(8),
            change_type=ChangeType.ENHANCED,
            before=bullet,
            after=new_bullet,
            description=f"Added metric to bullet {j + 1}",
        ))
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


def strengthen_opening(bullet: str, position: int) -> str:
    """Return the bullet starting with a strong action verb"""
    text = bullet.strip()
    pronoun = LEADING_PRONOUN.match(text)
    if pronoun:
        text = text[pronoun.end():]
        text = text[0].upper() + text[1:]
    if not text or starts_with_strong_verb(text):
        return text if pronoun else bullet
    for pattern, replacement in WEAK_OPENERS:
        if pattern.match(text):
            return pattern.sub(replacement, text, count=1)

    verb = POWER_VERBS[position % len(POWER_VERBS)]
    lead = first_word(text)
    if lead.lower().endswith('ed') and lead.lower() not in STOP_WORDS:
        # Past-tense but weak: swap the verb
        return re.sub(r'^\S+', verb, text, count=1)
    if lead.lower() in STOP_WORDS:
        text = text[0].lower() + text[1:]
    return f"{verb} {text}"


@register_fix(9, "strengthen action verbs")
def fix_action_verbs(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []
    for position, (section, i, j, bullet) in enumerate(resume.iter_bullets()):
        new_bullet = strengthen_opening(bullet, position)
        if new_bullet != bullet:
            doc.set_bullet(section, i, j, new_bullet)
            changes.append(RewriteChange(
                section=section,
                parameter=_label(9),
                change_type=ChangeType.ENHANCED,
                before=bullet,
                after=new_bullet,
                description="Added impact verb to bullet",
            ))
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(10, "raise keyword coverage")
def fix_keyword_density(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    missing = _missing_keywords(resume, list(ctx.profile.keywords))
    if not missing:
        return FixOutcome(resume)

    doc = resume.copy()
    changes = _add_skills(doc, missing, 10)

    critical = [k.display for k in missing if k.importance.rank <= 1 and not k.is_soft_skill][:3]
    if doc.summary.strip() and critical and 'expertise includes' not in doc.summary.lower():
        before = doc.summary
        doc.summary = f"{_strip_end(doc.summary)}. Expertise includes {', '.join(critical)}."
        changes.append(RewriteChange(
            section='summary',
            parameter=_label(10),
            change_type=ChangeType.ENHANCED,
            before=before,
            after=doc.summary,
            description=f"Added keywords to summary: {', '.join(critical)}",
        ))
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


def format_bullet(bullet: str) -> str:
    """Collapse whitespace, capitalize, pad short bullets and end with a period"""
    fixed = re.sub(r'\s{2,}', ' ', bullet).strip()
    fixed = re.sub(r'^[-•*▪◦]\s*', '', fixed)
    if not fixed:
        return fixed
    fixed = fixed[0].upper() + fixed[1:]
    if len(fixed.split()) < 5:
        fixed = f"{_strip_end(fixed)}, {SHORT_BULLET_PAD}"
    if not re.search(r'[.!?]$', fixed):
        fixed += '.'
    return re.sub(r'\.{2,}', '.', fixed)


@register_fix(11, "normalize bullet formatting")
def fix_formatting(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []
    for section, i, j, bullet in resume.iter_bullets():
        fixed = format_bullet(bullet)
        if fixed != bullet:
            doc.set_bullet(section, i, j, fixed)
            changes.append(RewriteChange(
                section=section,
                parameter=_label(11),
                change_type=ChangeType.ENHANCED,
                before=bullet,
                after=fixed,
                description="Fixed bullet formatting",
            ))
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(12, "fill empty sections")
def fix_section_completeness(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []

    if not doc.all_skills and ctx.profile.hard_skills:
        added = _add_skills(doc, ctx.profile.hard_skills, 12)
        if added:
            changes.append(RewriteChange(
                section='skills',
                parameter=_label(12),
                change_type=ChangeType.ADDED,
                after=", ".join(c.after for c in added),
                description="Created skills section structure",
            ))

    for index, exp in enumerate(doc.work_experience):
        if not exp.bullets:
            company = exp.company or 'the organization'
            exp.bullets = [b.format(company=company) for b in PLACEHOLDER_BULLETS]
            changes.append(RewriteChange(
                section='experience',
                parameter=_label(12),
                change_type=ChangeType.ADDED,
                after=" / ".join(exp.bullets),
                description=f"Added placeholder bullets for experience {index + 1}",
            ))

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(13, "normalize dates")
def fix_chronology(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    normalizer = DateNormalizer()
    doc = resume.copy()
    changes = []

    for section, entries in (('experience', doc.work_experience), ('education', doc.education)):
        for index, entry in enumerate(entries):
            if not entry.year:
                continue
            formatted = normalizer.normalize_range(entry.year)
            if formatted != entry.year:
                changes.append(RewriteChange(
                    section=section,
                    parameter=_label(13),
                    change_type=ChangeType.ENHANCED,
                    before=entry.year,
                    after=formatted,
                    description=f"Formatted date for {section} {index + 1}",
                ))
                entry.year = formatted

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(14, "reorder by relevance")
def fix_relevance(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    hard = [k.term for k in ctx.profile.hard_skills]
    roles = list(ctx.profile.role_terms)
    doc = resume.copy()
    changes = []

    def relevance(exp) -> int:
        text = " ".join([exp.role] + exp.bullets).lower()
        return sum(1 for t in hard if t in text) + sum(1 for t in roles if t in text)

    if len(doc.work_experience) > 1:
        # sorted() is stable, so ties keep their chronological order
        reordered = sorted(doc.work_experience, key=lambda e: -relevance(e))
        if any(a is not b for a, b in zip(reordered, doc.work_experience)):
            doc.work_experience = reordered
            changes.append(RewriteChange(
                section='experience',
                parameter=_label(14),
                change_type=ChangeType.REORDERED,
                description="Reordered experiences by relevance to the JD",
            ))

    for category in doc.skills:
        ordered = sorted(category.skills, key=lambda s: 0 if any(t in s.lower() for t in hard) else 1)
        if ordered != category.skills:
            category.skills = ordered
            changes.append(RewriteChange(
                section='skills',
                parameter=_label(14),
                change_type=ChangeType.REORDERED,
                description=f"Reordered {category.category} by JD relevance",
            ))

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(15, "add tool versions")
def fix_tools_versions(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    doc = resume.copy()
    changes = []
    for category in doc.skills:
        updated = []
        for skill in category.skills:
            versioned = TOOL_VERSIONS.get(skill.lower())
            if versioned and not re.search(r'\d', skill) and not category.contains(versioned):
                changes.append(RewriteChange(
                    section='skills',
                    parameter=_label(15),
                    change_type=ChangeType.ENHANCED,
                    before=skill,
                    after=versioned,
                    description=f"Added version to {skill}",
                ))
                updated.append(versioned)
            else:
                updated.append(skill)
        category.skills = updated
    return FixOutcome(doc, changes) if changes else FixOutcome(resume)


@register_fix(16, "deepen projects")
def fix_project_depth(resume: ResumeDocument, ctx: FixContext) -> FixOutcome:
    if not resume.projects:
        return FixOutcome(resume)

    indicators = [ind for group in DEPTH_INDICATORS.values() for ind in group]
    doc = resume.copy()
    changes = []

    for index, project in enumerate(doc.projects):
        text = " ".join([project.title, project.description] + project.bullets).lower()
        if project.bullets and not any(ind in text for ind in indicators):
            before = project.bullets[0]
            enhancement = DEPTH_ENHANCEMENTS[index % len(DEPTH_ENHANCEMENTS)]
            project.bullets[0] = f"{_strip_end(before)}, {enhancement}."
            changes.append(RewriteChange(
                section='projects',
                parameter=_label(16),
                change_type=ChangeType.ENHANCED,
                before=before,
                after=project.bullets[0],
                description=f"Added technical depth to '{project.title}'",
            ))

        existing = {t.lower() for t in project.tech_stack}
        additions = [k for k in ctx.profile.hard_skills
                     if k.term not in existing and k.display.lower() not in existing][:2]
        for keyword in additions:
            project.tech_stack.append(keyword.display)
        if additions:
            changes.append(RewriteChange(
                section='projects',
                parameter=_label(16),
                change_type=ChangeType.ADDED,
                after=", ".join(k.display for k in additions),
                description=f"Added JD-relevant tech to '{project.title}'",
            ))

    return FixOutcome(doc, changes) if changes else FixOutcome(resume)
