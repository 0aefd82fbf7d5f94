# resume_optimizer/normalizer.py
"""
Normalization boundary: raw input in, fully-defaulted ResumeDocument out
"""
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import ftfy

from resume_optimizer.models import (
    ResumeDocument, ContactInfo, SkillCategory, WorkExperience,
    Project, Education, Certification
)
from resume_optimizer.ats.taxonomy import SkillCategories, categorize_skill, format_skill_name
from resume_optimizer.errors import ParseAmbiguityWarning

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-empty value among snake_case / camelCase aliases"""
    for key in keys:
        value = data.get(key)
        if value not in (None, "", [], {}):
            return value
    return default


def _string_list(value: Any) -> List[str]:
    """Accept a list or a newline-separated string; drop empty items"""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.splitlines()
    else:
        items = [_text(v) for v in value]
    cleaned = [BULLET_PREFIX.sub('', item).strip() for item in items]
    return [item for item in cleaned if item]


def _comma_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(',') if v.strip()]
    return [_text(v) for v in value if _text(v)]


def _categorize_flat(terms: List[str]) -> List[SkillCategory]:
    grouped: Dict[str, SkillCategory] = {}
    for term in terms:
        category = categorize_skill(term) or SkillCategories.TOOLS_PLATFORMS
        grouped.setdefault(category, SkillCategory(category, []))
        grouped[category].add(format_skill_name(term))
    return list(grouped.values())


def _normalize_skills(raw: Any) -> List[SkillCategory]:
    if not raw:
        return []
    if isinstance(raw, dict):
        return [
            SkillCategory(_text(name), _comma_list(terms))
            for name, terms in raw.items() if _text(name)
        ]
    if isinstance(raw, str):
        return _categorize_flat(_comma_list(raw))

    categories = []
    flat = []
    for item in raw:
        if isinstance(item, dict):
            name = _text(_pick(item, 'category', 'name', 'title'))
            terms = _comma_list(_pick(item, 'list', 'skills', 'items', default=[]))
            if name:
                categories.append(SkillCategory(name, terms))
            else:
                flat.extend(terms)
        elif _text(item):
            flat.append(_text(item))
    return categories + _categorize_flat(flat)


def _normalize_contact(raw: Dict[str, Any]) -> ContactInfo:
    contact = _pick(raw, 'contact', 'personal_info', 'personalInfo', default={}) or {}
    source = {**raw, **contact}
    return ContactInfo(
        name=_text(_pick(source, 'name', 'full_name', 'fullName')),
        email=_text(_pick(source, 'email')),
        phone=_text(_pick(source, 'phone', 'phone_number', 'phoneNumber')),
        linkedin=_text(_pick(source, 'linkedin', 'linked_in', 'linkedIn')),
        github=_text(_pick(source, 'github', 'gitHub')),
        location=_text(_pick(source, 'location', 'city')),
    )


def _normalize_experience(item: Dict[str, Any]) -> WorkExperience:
    year = _text(_pick(item, 'year', 'years', 'duration', 'dates', 'date_range', 'dateRange'))
    if not year:
        start = _text(_pick(item, 'start_date', 'startDate', 'start'))
        end = _text(_pick(item, 'end_date', 'endDate', 'end'))
        year = " - ".join(v for v in [start, end] if v)
    return WorkExperience(
        role=_text(_pick(item, 'role', 'title', 'position', 'job_title', 'jobTitle')),
        company=_text(_pick(item, 'company', 'organization', 'employer')),
        year=year,
        location=_text(_pick(item, 'location')),
        bullets=_string_list(_pick(item, 'bullets', 'achievements', 'responsibilities',
                                   'highlights', 'description', default=[])),
    )


def _normalize_project(item: Dict[str, Any]) -> Project:
    return Project(
        title=_text(_pick(item, 'title', 'name')),
        description=_text(_pick(item, 'description', 'summary')),
        bullets=_string_list(_pick(item, 'bullets', 'highlights', 'achievements', default=[])),
        tech_stack=_comma_list(_pick(item, 'tech_stack', 'techStack', 'technologies',
                                     'tech', default=[])),
    )


def _normalize_education(item: Dict[str, Any]) -> Education:
    return Education(
        degree=_text(_pick(item, 'degree')),
        school=_text(_pick(item, 'school', 'institution', 'university', 'college')),
        year=_text(_pick(item, 'year', 'graduation_year', 'graduationYear', 'end_date', 'endDate')),
        field_of_study=_text(_pick(item, 'field_of_study', 'fieldOfStudy', 'field', 'major')),
        cgpa=_text(_pick(item, 'cgpa', 'gpa', 'grade')),
        location=_text(_pick(item, 'location')),
    )


def _normalize_certification(item: Any) -> Certification:
    if isinstance(item, dict):
        return Certification(
            title=_text(_pick(item, 'title', 'name')),
            description=_text(_pick(item, 'description', 'issuer')),
        )
    return Certification(title=_text(item))


def normalize_resume(raw: Optional[Dict[str, Any]]) -> ResumeDocument:
    """
    Build a canonical ResumeDocument from loosely structured data.

    Accepts snake_case or camelCase keys. Skills may be a list of
    ``{category, list}`` records, a mapping of category to terms, or a
    flat list of terms (auto-categorized). Empty bullets and entries with
    no content are dropped.

    Args:
        raw: Parsed JSON-like dict (None gives an empty document)

    Returns:
        ResumeDocument with every field populated
    """
    if raw is None:
        return ResumeDocument()
    if isinstance(raw, ResumeDocument):
        return raw.copy()
    if not isinstance(raw, dict):
        raise TypeError(f"Expected a dict, got {type(raw).__name__}")

    experience = [
        _normalize_experience(e)
        for e in _pick(raw, 'work_experience', 'workExperience', 'experience', default=[])
        if isinstance(e, dict)
    ]
    projects = [
        _normalize_project(p)
        for p in _pick(raw, 'projects', default=[])
        if isinstance(p, dict)
    ]
    education = [
        _normalize_education(e)
        for e in _pick(raw, 'education', default=[])
        if isinstance(e, dict)
    ]
    certifications = [
        _normalize_certification(c)
        for c in _pick(raw, 'certifications', 'certificates', default=[])
    ]

    resume = ResumeDocument(
        contact=_normalize_contact(raw),
        target_role=_text(_pick(raw, 'target_role', 'targetRole', 'title', 'headline')),
        summary=_text(_pick(raw, 'summary', 'professional_summary', 'professionalSummary',
                            'objective')),
        skills=[c for c in _normalize_skills(_pick(raw, 'skills', default=[])) if c.category],
        work_experience=[e for e in experience if e.role or e.company or e.bullets],
        projects=[p for p in projects if p.title or p.bullets],
        education=[e for e in education if e.degree or e.school],
        certifications=[c for c in certifications if c.title],
        achievements=_string_list(_pick(raw, 'achievements', 'awards', default=[])),
    )
    logger.debug(
        f"Normalized resume: {len(resume.work_experience)} experience, "
        f"{len(resume.projects)} projects, {len(resume.skills)} skill categories"
    )
    return resume


# Raw text parsing

SECTION_HEADERS = {
    'summary': 'summary',
    'professional summary': 'summary',
    'profile': 'summary',
    'objective': 'summary',
    'career objective': 'summary',
    'about me': 'summary',
    'skills': 'skills',
    'technical skills': 'skills',
    'core competencies': 'skills',
    'key skills': 'skills',
    'experience': 'experience',
    'work experience': 'experience',
    'professional experience': 'experience',
    'employment history': 'experience',
    'work history': 'experience',
    'projects': 'projects',
    'personal projects': 'projects',
    'academic projects': 'projects',
    'key projects': 'projects',
    'education': 'education',
    'academic background': 'education',
    'certifications': 'certifications',
    'certificates': 'certifications',
    'licenses & certifications': 'certifications',
    'achievements': 'achievements',
    'awards': 'achievements',
    'honors & awards': 'achievements',
    'accomplishments': 'achievements',
}

BULLET_PREFIX = re.compile(r'^\s*(?:[-•*▪◦●‣]|\d+[.)])\s+')
EMAIL_PATTERN = re.compile(r'[\w.+-]+@[\w-]+\.[\w.-]+')
PHONE_PATTERN = re.compile(r'\+?\d[\d\s().-]{8,}\d')
LINKEDIN_PATTERN = re.compile(r'(?:https?://)?(?:www\.)?linkedin\.com/[^\s|,]+', re.IGNORECASE)
GITHUB_PATTERN = re.compile(r'(?:https?://)?(?:www\.)?github\.com/[^\s|,]+', re.IGNORECASE)
MONTH = r'(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?'
DATE_RANGE_PATTERN = re.compile(
    rf'(?:{MONTH}\s+)?\d{{4}}\s*(?:–|—|-|to)\s*(?:(?:{MONTH}\s+)?\d{{4}}|present|current|now)'
    rf'|(?:{MONTH}\s+)?\d{{4}}',
    re.IGNORECASE
)
DEGREE_PATTERN = re.compile(
    r'\b(?:bachelor|master|b\.?\s?s\.?c?|m\.?\s?s\.?c?|b\.?\s?tech|m\.?\s?tech|b\.?\s?e\b|'
    r'ph\.?\s?d|mba|diploma|associate|degree|b\.?a\b|m\.?a\b)',
    re.IGNORECASE
)
SCHOOL_PATTERN = re.compile(r'\b(?:university|college|institute|school|academy)\b', re.IGNORECASE)
ENTRY_SEPARATORS = re.compile(r'\s*(?:\||·|—|–|\s-\s|,|\bat\b|@)\s*')
TECH_PARENS = re.compile(r'\(([^)]*)\)\s*$')


@dataclass
class NormalizationResult:
    """Parsed resume plus how confident the segmentation was"""
    resume: ResumeDocument
    warnings: List[ParseAmbiguityWarning] = field(default_factory=list)
    confidence: float = 1.0

    @property
    def is_confident(self) -> bool:
        return not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resume': self.resume.to_dict(),
            'warnings': [w.to_dict() for w in self.warnings],
            'confidence': self.confidence,
        }


def clean_resume_text(text: str) -> str:
    """Fix mojibake and invisible characters, keep line structure"""
    if not text:
        return ""
    text = ftfy.fix_text(text, normalization="NFC")
    text = text.replace('\u200b', '').replace('\ufeff', '')
    lines = [re.sub(r'[ \t]+', ' ', line).strip() for line in text.splitlines()]
    return "\n".join(lines).strip()


def _header_key(line: str) -> Optional[str]:
    candidate = line.strip().rstrip(':').strip().lower()
    if not candidate or len(candidate.split()) > 4:
        return None
    return SECTION_HEADERS.get(candidate)


def _split_sections(lines: List[str]) -> Tuple[List[str], Dict[str, List[str]]]:
    preamble: List[str] = []
    sections: Dict[str, List[str]] = {}
    current = None
    for line in lines:
        key = _header_key(line)
        if key:
            current = key
            sections.setdefault(key, [])
            continue
        if current is None:
            preamble.append(line)
        else:
            sections[current].append(line)
    return preamble, sections


def _is_bullet(line: str) -> bool:
    return bool(BULLET_PREFIX.match(line))


def _strip_bullet(line: str) -> str:
    return BULLET_PREFIX.sub('', line).strip()


def _find_phone(text: str) -> str:
    for match in PHONE_PATTERN.finditer(text):
        if len(re.sub(r'\D', '', match.group(0))) >= 10:
            return match.group(0).strip()
    return ""


def _parse_contact(preamble: List[str], full_text: str) -> Tuple[ContactInfo, str]:
    contact = ContactInfo()
    email = EMAIL_PATTERN.search(full_text)
    phone = _find_phone("\n".join(preamble)) or _find_phone(full_text)
    linkedin = LINKEDIN_PATTERN.search(full_text)
    github = GITHUB_PATTERN.search(full_text)
    contact.email = email.group(0) if email else ""
    contact.phone = phone
    contact.linkedin = linkedin.group(0) if linkedin else ""
    contact.github = github.group(0) if github else ""

    plain = [
        line for line in preamble
        if line and not EMAIL_PATTERN.search(line) and not _find_phone(line)
        and not LINKEDIN_PATTERN.search(line) and not GITHUB_PATTERN.search(line)
    ]
    target_role = ""
    if plain:
        contact.name = plain[0]
    if len(plain) > 1 and len(plain[1].split()) <= 6 and not any(ch.isdigit() for ch in plain[1]):
        target_role = plain[1]
    return contact, target_role


def _parse_skills(lines: List[str]) -> List[SkillCategory]:
    categories = []
    flat = []
    for line in lines:
        text = _strip_bullet(line)
        if not text:
            continue
        if ':' in text:
            name, terms = text.split(':', 1)
            categories.append(SkillCategory(name.strip(), _comma_list(terms)))
        else:
            flat.extend(_comma_list(text))
    return [c for c in categories if c.category and c.skills] + _categorize_flat(flat)


def _split_header(line: str) -> Tuple[List[str], str]:
    """Split an entry header into text parts and its date range"""
    match = DATE_RANGE_PATTERN.search(line)
    dates = ""
    if match:
        dates = match.group(0).strip()
        line = (line[:match.start()] + line[match.end():])
    line = re.sub(r'[()]', ' ', line)
    parts = [p.strip(' ,|') for p in ENTRY_SEPARATORS.split(line)]
    return [p for p in parts if p], dates


def _parse_experience(lines: List[str]) -> List[WorkExperience]:
    entries: List[WorkExperience] = []
    current: Optional[WorkExperience] = None
    for line in lines:
        if not line:
            continue
        if _is_bullet(line):
            if current is None:
                current = WorkExperience()
                entries.append(current)
            current.bullets.append(_strip_bullet(line))
            continue

        parts, dates = _split_header(line)
        if current is not None and not current.bullets and (not current.company or not current.year):
            # Second header line (company or dates on their own line)
            if not current.company and parts:
                current.company = parts[0]
            if not current.year and dates:
                current.year = dates
            continue

        current = WorkExperience(
            role=parts[0] if parts else "",
            company=parts[1] if len(parts) > 1 else "",
            year=dates,
            location=parts[2] if len(parts) > 2 else "",
        )
        entries.append(current)
    return entries


def _parse_projects(lines: List[str]) -> List[Project]:
    projects: List[Project] = []
    current: Optional[Project] = None
    for line in lines:
        if not line:
            continue
        if _is_bullet(line):
            if current is None:
                current = Project()
                projects.append(current)
            current.bullets.append(_strip_bullet(line))
            continue

        title = line
        tech: List[str] = []
        parens = TECH_PARENS.search(title)
        if parens:
            tech = _comma_list(parens.group(1))
            title = title[:parens.start()].strip()
        elif '|' in title:
            title, tech_text = title.split('|', 1)
            tech = _comma_list(tech_text)
        current = Project(title=title.strip(), tech_stack=tech)
        projects.append(current)
    return projects


def _parse_education(lines: List[str]) -> List[Education]:
    entries: List[Education] = []
    current: Optional[Education] = None
    for line in lines:
        text = _strip_bullet(line)
        if not text:
            continue
        parts, dates = _split_header(text)
        degree = next((p for p in parts if DEGREE_PATTERN.search(p)), "")
        school = next((p for p in parts if SCHOOL_PATTERN.search(p)), "")
        if current is None or (degree and current.degree) or (school and current.school):
            current = Education()
            entries.append(current)
        current.degree = current.degree or degree
        current.school = current.school or school
        current.year = current.year or dates
        leftovers = [p for p in parts if p not in (degree, school)]
        if leftovers and not current.field_of_study and current.degree:
            current.field_of_study = leftovers[0]
    return [e for e in entries if e.degree or e.school]


def normalize_resume_text(text: str) -> NormalizationResult:
    """
    Best-effort parse of plain resume text.

    The text is cleaned with ftfy, split on known section headers and
    each section parsed on its own. Sections that cannot be segmented
    produce a ParseAmbiguityWarning and lower the confidence instead of
    raising.

    Args:
        text: Plain text extracted from a resume file

    Returns:
        NormalizationResult with a fully-defaulted ResumeDocument
    """
    cleaned = clean_resume_text(text)
    lines = cleaned.splitlines()
    preamble, sections = _split_sections(lines)
    warnings: List[ParseAmbiguityWarning] = []

    contact, target_role = _parse_contact(preamble, cleaned)
    resume = ResumeDocument(contact=contact, target_role=target_role)

    if not sections:
        warnings.append(ParseAmbiguityWarning(
            'document', 0.2, "No section headers found; only contact details were extracted"
        ))
        body = [_strip_bullet(l) for l in preamble[2:] if l]
        resume.summary = " ".join(l for l in body if not EMAIL_PATTERN.search(l))

    resume.summary = resume.summary or " ".join(l for l in sections.get('summary', []) if l)
    resume.skills = _parse_skills(sections.get('skills', []))
    resume.work_experience = _parse_experience(sections.get('experience', []))
    resume.projects = _parse_projects(sections.get('projects', []))
    resume.education = _parse_education(sections.get('education', []))
    resume.certifications = [
        Certification(title=_strip_bullet(l)) for l in sections.get('certifications', []) if _strip_bullet(l)
    ]
    resume.achievements = [_strip_bullet(l) for l in sections.get('achievements', []) if _strip_bullet(l)]

    for key, parsed in [('skills', resume.skills), ('experience', resume.work_experience),
                        ('projects', resume.projects), ('education', resume.education)]:
        if any(sections.get(key, [])) and not parsed:
            warnings.append(ParseAmbiguityWarning(key, 0.4))

    if any(not e.role or not e.company for e in resume.work_experience):
        warnings.append(ParseAmbiguityWarning(
            'experience', 0.6, "Some experience entries are missing a role or company"
        ))

    confidence = min([w.confidence for w in warnings], default=1.0)
    for warning in warnings:
        logger.warning(f"Parse ambiguity in {warning.section}: {warning}")
    logger.info(f"✓ Parsed resume text (confidence {confidence:.1f})")
    return NormalizationResult(resume=resume, warnings=warnings, confidence=confidence)
