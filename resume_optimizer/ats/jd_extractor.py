# resume_optimizer/ats/jd_extractor.py
import re
import logging
from collections import OrderedDict
from functools import lru_cache
from typing import List, Dict, Optional, Tuple

from resume_optimizer.ats.models import (
    JobRequirementProfile, RequirementKeyword, KeywordCategory, Importance, Seniority
)
from resume_optimizer.ats.taxonomy import format_skill_name
from resume_optimizer.config import EngineConfig, get_config

logger = logging.getLogger(__name__)


# Curated vocabularies, checked in this order; first category wins
VOCABULARIES = OrderedDict([
    (KeywordCategory.LANGUAGE, [
        'java', 'python', 'javascript', 'typescript', 'c++', 'c#', 'go', 'rust', 'ruby',
        'php', 'swift', 'kotlin', 'scala', 'r', 'matlab', 'perl', 'html', 'css', 'sql',
        'bash',
    ]),
    (KeywordCategory.FRAMEWORK, [
        'react', 'angular', 'vue', 'svelte', 'next.js', 'nuxt', 'gatsby', 'redux',
        'node.js', 'spring boot', 'spring', 'django', 'flask', 'fastapi', 'express',
        'nestjs', 'laravel', 'rails', 'asp.net', '.net core', 'tensorflow', 'pytorch',
        'scikit-learn', 'pandas', 'numpy', 'hadoop', 'spark', 'jest', 'mocha',
        'cypress', 'playwright', 'selenium', 'pytest', 'junit', 'webpack', 'vite',
        'tailwind', 'bootstrap', 'material ui', 'sass', 'scss',
    ]),
    (KeywordCategory.DATABASE, [
        'mysql', 'postgresql', 'mongodb', 'redis', 'cassandra', 'dynamodb',
        'elasticsearch', 'oracle', 'sql server', 'mariadb', 'couchdb', 'neo4j',
        'sqlite', 'snowflake',
    ]),
    (KeywordCategory.CLOUD, [
        'aws', 'azure', 'gcp', 'ec2', 's3', 'lambda', 'rds', 'eks', 'ecs',
        'cloudformation', 'azure functions', 'cloud run', 'cloud functions', 'gke',
    ]),
    (KeywordCategory.DEVOPS, [
        'docker', 'kubernetes', 'jenkins', 'gitlab ci', 'github actions', 'terraform',
        'ansible', 'puppet', 'chef', 'circleci', 'travis ci', 'helm', 'prometheus',
        'grafana', 'elk', 'datadog', 'new relic', 'argocd', 'linux', 'nginx',
    ]),
    (KeywordCategory.ARCHITECTURE, [
        'microservices', 'rest api', 'restful', 'graphql', 'grpc', 'event-driven',
        'message queue', 'kafka', 'rabbitmq', 'pub/sub', 'api gateway',
        'load balancer', 'caching', 'cdn', 'serverless', 'ci/cd', 'scalability',
        'high availability', 'fault tolerance', 'oauth', 'jwt',
    ]),
    (KeywordCategory.DOMAIN, [
        'fintech', 'healthcare', 'e-commerce', 'saas', 'edtech', 'payments',
        'trading', 'banking', 'insurance', 'blockchain', 'machine learning',
        'artificial intelligence', 'nlp', 'computer vision', 'data science',
        'analytics', 'big data', 'iot',
    ]),
    (KeywordCategory.SOFT_SKILL, [
        'leadership', 'communication', 'collaboration', 'problem solving',
        'analytical', 'teamwork', 'agile', 'scrum', 'mentoring', 'cross-functional',
        'stakeholder management',
    ]),
])

# Alternate spellings matched as the canonical term
ALIASES = {
    'kubernetes': ['k8s'],
    'postgresql': ['postgres'],
    'node.js': ['nodejs'],
    'go': ['golang'],
    'aws': ['amazon web services'],
    'gcp': ['google cloud', 'google cloud platform'],
    'azure': ['microsoft azure'],
    'ci/cd': ['continuous integration', 'continuous delivery', 'continuous deployment'],
    'problem solving': ['problem-solving'],
    'machine learning': ['ml'],
}

# Short terms that collide with ordinary English unless cased
CASE_SENSITIVE = {'go': 'Go', 'r': 'R'}

CRITICAL_CUES = re.compile(r'\b(?:required|requirements?|must[\s-]have|must|essential|critical|mandatory)\b')
HIGH_CUES = re.compile(r'\b(?:strong|proficient|proficiency|expert|expertise|advanced|deep)\b')
LOWER_CUES = re.compile(r'\b(?:preferred|nice[\s-]to[\s-]have|bonus|a plus|desired|optional|familiarity)\b')

ROLE_PATTERN = re.compile(
    r'\b(engineer|developer|architect|lead|senior|junior|manager|analyst|specialist|'
    r'consultant|designer|administrator|devops|sre|full.?stack|front.?end|back.?end|'
    r'data|ml|ai|cloud|platform|software|web|mobile|ios|android|scientist)\b',
    re.IGNORECASE
)

# Seniority is resolved top-down; first match wins
SENIORITY_PATTERNS = [
    (Seniority.PRINCIPAL, re.compile(r'\b(principal|staff|distinguished|director)\b', re.IGNORECASE)),
    (Seniority.LEAD, re.compile(r'\b(lead|tech lead|team lead|engineering lead)\b', re.IGNORECASE)),
    (Seniority.SENIOR, re.compile(r'\b(senior|sr\.?|experienced)\b', re.IGNORECASE)),
    (Seniority.ENTRY, re.compile(r'\b(junior|jr\.?|entry|fresher|graduate|intern)\b', re.IGNORECASE)),
]

SENIORITY_PREFIX = {
    Seniority.ENTRY: 'Junior',
    Seniority.MID: '',
    Seniority.SENIOR: 'Senior',
    Seniority.LEAD: 'Lead',
    Seniority.PRINCIPAL: 'Principal',
}

TITLE_PATTERNS = [
    re.compile(r'(?:position|role|job title|job)\s*:\s*([^\n]+)', re.IGNORECASE),
    re.compile(
        r'(?:looking for|seeking|hiring)\s+(?:an?\s+)?([a-z/\s]+?(?:engineer|developer|architect|'
        r'manager|analyst|designer|scientist))\b',
        re.IGNORECASE
    ),
    re.compile(
        r'^([A-Z][A-Za-z/]+(?:\s+[A-Z][A-Za-z/]+)*\s+'
        r'(?:Engineer|Developer|Architect|Manager|Analyst|Designer|Scientist))',
        re.MULTILINE
    ),
]

YEARS_PATTERN = re.compile(r'(\d+)\+?\s*(?:years?|yrs?)\s*(?:of)?\s*(?:experience|exp)', re.IGNORECASE)
RESPONSIBILITY_PATTERN = re.compile(
    r'(?:responsible for|you will|duties include|responsibilities include)[:\s]*([^.\n]+)',
    re.IGNORECASE
)


def _term_pattern(term: str) -> str:
    alternatives = [term] + ALIASES.get(term, [])
    escaped = "|".join(re.escape(a) for a in alternatives)
    return rf'(?<![\w.+#/-])(?:{escaped})(?![\w+#/-])'


class JDExtractor:
    """
    Parse free-text job descriptions into JobRequirementProfile objects.

    Extraction is a pure function of (text, role, policy); results are
    memoized so repeated calls with the same JD are free.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_config()

    def extract(self, jd_text: Optional[str], role: Optional[str] = None) -> JobRequirementProfile:
        """
        Extract a requirement profile

        Args:
            jd_text: Full JD text (may be empty)
            role: Explicit target role, overrides the title found in the text

        Returns:
            JobRequirementProfile
        """
        cutoffs = self.config.importance_cutoffs
        return _extract_cached(
            jd_text or "",
            (role or "").strip(),
            self.config.context_window,
            (cutoffs.get('critical', 5), cutoffs.get('high', 3), cutoffs.get('medium', 2)),
        )


@lru_cache(maxsize=128)
def _extract_cached(
    jd_text: str,
    role: str,
    context_window: int,
    cutoffs: Tuple[int, int, int]
) -> JobRequirementProfile:
    if not jd_text.strip():
        logger.info("Empty job description, using default profile")
        return JobRequirementProfile(
            role_title=role or "Software Engineer",
            seniority=Seniority.MID,
            role_terms=tuple(_role_terms(role)),
        )

    logger.info(f"Extracting requirements from job description ({len(jd_text)} chars)")

    keywords = _extract_keywords(jd_text, context_window, cutoffs)
    seniority = _detect_seniority(role + "\n" + jd_text if role else jd_text)
    role_terms = _role_terms(role + " " + jd_text if role else jd_text)
    title = role or _extract_title(jd_text, seniority, role_terms)

    years_match = YEARS_PATTERN.search(jd_text)
    years = int(years_match.group(1)) if years_match else 0

    responsibilities = tuple(
        m.group(1).strip() for m in RESPONSIBILITY_PATTERN.finditer(jd_text)
        if m.group(1).strip()
    )

    profile = JobRequirementProfile(
        role_title=title,
        seniority=seniority,
        keywords=tuple(keywords),
        role_terms=tuple(role_terms),
        years_required=years,
        responsibilities=responsibilities,
    )

    critical = len(profile.by_importance(Importance.CRITICAL))
    logger.info(
        f"✓ Extracted {len(keywords)} keywords ({critical} critical), "
        f"seniority={seniority.value}, title='{title}'"
    )
    return profile


def _extract_keywords(
    text: str,
    context_window: int,
    cutoffs: Tuple[int, int, int]
) -> List[RequirementKeyword]:
    text_lower = text.lower()
    found: Dict[str, RequirementKeyword] = {}
    first_positions: Dict[str, int] = {}

    for category, terms in VOCABULARIES.items():
        for term in terms:
            if term in found:
                continue

            if term in CASE_SENSITIVE:
                pattern = rf'(?<![\w.+#/&-]){re.escape(CASE_SENSITIVE[term])}(?![\w+#/&-])'
                matches = list(re.finditer(pattern, text))
            else:
                matches = list(re.finditer(_term_pattern(term), text_lower))

            if not matches:
                continue

            importance = _determine_importance(text_lower, matches, context_window, cutoffs)
            first = matches[0]
            start = max(0, first.start() - 40)
            end = min(len(text), first.end() + 40)

            found[term] = RequirementKeyword(
                term=term,
                display=format_skill_name(term),
                category=category,
                importance=importance,
                frequency=len(matches),
                context=text[start:end].strip(),
            )
            first_positions[term] = first.start()

    # Ordered set: importance, then frequency, then order of appearance
    return sorted(
        found.values(),
        key=lambda k: (k.importance.rank, -k.frequency, first_positions[k.term])
    )


def _determine_importance(
    text_lower: str,
    matches: List[re.Match],
    context_window: int,
    cutoffs: Tuple[int, int, int]
) -> Importance:
    """
    Decide a keyword's tier.

    The cue phrase nearest to any occurrence wins. Without a cue the
    tier comes from how often the keyword appears.
    """
    frequency = len(matches)
    critical_cutoff, high_cutoff, medium_cutoff = cutoffs

    if frequency >= critical_cutoff:
        frequency_tier = Importance.CRITICAL
    elif frequency >= high_cutoff:
        frequency_tier = Importance.HIGH
    elif frequency >= medium_cutoff:
        frequency_tier = Importance.MEDIUM
    else:
        frequency_tier = Importance.LOW

    best: Optional[Tuple[int, str]] = None
    for match in matches:
        start = max(0, match.start() - context_window)
        end = min(len(text_lower), match.end() + context_window)
        window = text_lower[start:end]
        anchor = match.start() - start

        for kind, pattern in (('critical', CRITICAL_CUES), ('high', HIGH_CUES), ('lower', LOWER_CUES)):
            for cue in pattern.finditer(window):
                distance = abs(cue.start() - anchor)
                if best is None or distance < best[0]:
                    best = (distance, kind)

    if best is None:
        return frequency_tier

    kind = best[1]
    if kind == 'critical':
        return Importance.CRITICAL
    if kind == 'high':
        return Importance.HIGH

    # Preferred / nice-to-have: one tier below frequency, never above medium
    lowered_rank = min(frequency_tier.rank + 1, Importance.LOW.rank)
    lowered_rank = max(lowered_rank, Importance.MEDIUM.rank)
    return [i for i in Importance if i.rank == lowered_rank][0]


def _detect_seniority(text: str) -> Seniority:
    for level, pattern in SENIORITY_PATTERNS:
        if pattern.search(text):
            return level
    return Seniority.MID


def _role_terms(text: str) -> List[str]:
    terms = []
    for match in ROLE_PATTERN.finditer(text or ""):
        term = match.group(1).lower()
        if term not in terms:
            terms.append(term)
    return terms


def _extract_title(text: str, seniority: Seniority, role_terms: List[str]) -> str:
    lines = [line.strip() for line in text.split('\n') if line.strip()]
    if lines:
        first = lines[0]
        if len(first) < 100 and '.' not in first and ROLE_PATTERN.search(first):
            title = re.sub(r'^(?:job title|position|role|hiring for)\s*:\s*', '', first, flags=re.IGNORECASE)
            title = re.split(r'\s+[-–—|]\s+', title)[0].strip()
            if title:
                return title

    for pattern in TITLE_PATTERNS:
        match = pattern.search(text)
        if match:
            title = re.split(r'\s*[-–—|]\s*', match.group(1).strip())[0].strip()
            if title:
                return " ".join(w[:1].upper() + w[1:] for w in title.split())

    # Build one from seniority and the first recognizable role noun
    noun = next(
        (t for t in role_terms if t in ('engineer', 'developer', 'architect', 'analyst', 'designer')),
        'engineer'
    )
    prefix = SENIORITY_PREFIX[seniority]
    return " ".join(p for p in [prefix, 'Software', noun.capitalize()] if p)


def extract_profile(
    jd_text: Optional[str],
    role: Optional[str] = None,
    config: Optional[EngineConfig] = None
) -> JobRequirementProfile:
    """Convenience wrapper around JDExtractor.extract"""
    return JDExtractor(config).extract(jd_text, role)
