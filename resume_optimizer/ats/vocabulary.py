# resume_optimizer/ats/vocabulary.py
"""
Word lists and patterns shared by the scorer and the fix strategies
"""
import re

IMPACT_VERBS = {
    'achievement': ['Achieved', 'Exceeded', 'Surpassed', 'Attained', 'Accomplished', 'Delivered', 'Generated', 'Produced'],
    'leadership': ['Spearheaded', 'Led', 'Directed', 'Orchestrated', 'Championed', 'Pioneered', 'Drove', 'Headed'],
    'development': ['Engineered', 'Architected', 'Developed', 'Built', 'Designed', 'Implemented', 'Created', 'Constructed'],
    'improvement': ['Optimized', 'Enhanced', 'Streamlined', 'Accelerated', 'Transformed', 'Revamped', 'Modernized', 'Boosted'],
    'analysis': ['Analyzed', 'Evaluated', 'Assessed', 'Identified', 'Diagnosed', 'Investigated', 'Researched', 'Discovered'],
    'collaboration': ['Collaborated', 'Partnered', 'Coordinated', 'Facilitated', 'Unified', 'Integrated', 'Aligned', 'Synergized'],
    'management': ['Managed', 'Oversaw', 'Supervised', 'Administered', 'Controlled', 'Governed', 'Maintained', 'Regulated'],
    'innovation': ['Innovated', 'Invented', 'Conceptualized', 'Devised', 'Formulated', 'Established', 'Introduced', 'Launched'],
}

STRONG_VERBS = frozenset(v.lower() for verbs in IMPACT_VERBS.values() for v in verbs)

# Weak openings rewritten to a strong verb; first match wins
WEAK_OPENERS = [
    (re.compile(r'^(?:was\s+)?responsible\s+for\s+', re.IGNORECASE), 'Oversaw '),
    (re.compile(r'^worked\s+on\s+', re.IGNORECASE), 'Developed '),
    (re.compile(r'^worked\s+with\s+', re.IGNORECASE), 'Collaborated with '),
    (re.compile(r'^helped\s+(?:to\s+)?', re.IGNORECASE), 'Facilitated '),
    (re.compile(r'^assisted\s+(?:in\s+|with\s+)?', re.IGNORECASE), 'Coordinated '),
    (re.compile(r'^(?:was\s+)?involved\s+in\s+', re.IGNORECASE), 'Collaborated on '),
    (re.compile(r'^made\s+', re.IGNORECASE), 'Built '),
    (re.compile(r'^handled\s+', re.IGNORECASE), 'Managed '),
    (re.compile(r'^used\s+', re.IGNORECASE), 'Implemented '),
]

STOP_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with',
    'by', 'from', 'as', 'is', 'was', 'are', 'were', 'been', 'be', 'have', 'has', 'had',
    'do', 'does', 'did', 'will', 'would', 'could', 'should', 'may', 'might', 'must',
    'shall', 'can', 'need', 'that', 'which', 'who', 'whom', 'this', 'these', 'those',
    'it', 'its', 'i', 'we', 'you', 'he', 'she', 'they', 'them', 'their', 'our', 'my',
    'your', 'his', 'her', 'using', 'used', 'based', 'including', 'into', 'across',
    'over', 'through', 'than', 'more', 'while', 'all', 'new', 'per',
])

SYNONYMS = {
    'developed': ['built', 'created', 'engineered', 'designed', 'implemented', 'constructed'],
    'implemented': ['deployed', 'executed', 'established', 'integrated', 'introduced'],
    'created': ['designed', 'developed', 'built', 'produced', 'generated'],
    'improved': ['enhanced', 'optimized', 'boosted', 'elevated', 'refined', 'streamlined'],
    'managed': ['led', 'directed', 'oversaw', 'coordinated', 'supervised', 'administered'],
    'worked': ['collaborated', 'partnered', 'engaged', 'contributed', 'participated'],
    'built': ['constructed', 'developed', 'created', 'assembled', 'established'],
    'designed': ['architected', 'crafted', 'devised', 'formulated', 'planned'],
    'analyzed': ['evaluated', 'assessed', 'examined', 'investigated', 'reviewed'],
    'reduced': ['decreased', 'minimized', 'cut', 'lowered', 'diminished'],
    'increased': ['boosted', 'elevated', 'raised', 'expanded', 'grew'],
    'led': ['spearheaded', 'headed', 'directed', 'guided', 'championed'],
    'collaborated': ['partnered', 'teamed', 'cooperated', 'coordinated'],
    'optimized': ['enhanced', 'improved', 'streamlined', 'refined', 'tuned'],
    'automated': ['streamlined', 'mechanized', 'systematized', 'scripted'],
    'delivered': ['shipped', 'launched', 'released', 'completed', 'executed'],
    'system': ['platform', 'service', 'solution', 'infrastructure'],
    'application': ['service', 'product', 'tool', 'platform'],
    'team': ['group', 'squad', 'crew'],
    'data': ['records', 'datasets', 'information'],
    'performance': ['throughput', 'efficiency', 'responsiveness', 'speed'],
}

METRIC_PATTERN = re.compile(
    r'\d+%|\$\d+|\d+\s*(?:users?|customers?|clients?|team|people|million|k\b|x\b|hours?|'
    r'days?|weeks?|months?|engineers?|developers?|projects?|requests?)',
    re.IGNORECASE
)

VERSION_PATTERN = re.compile(
    r'\b(?:v?\d+\.\d+(?:\.\d+)?|ES\d+|Python\s*[23]|React\s*\d+|Node(?:\.js)?\s*\d+|Java\s*\d+)\b'
)

METRIC_CLAUSES = [
    'improving efficiency by 40%',
    'reducing development time by 30%',
    'achieving 99.9% uptime',
    'serving 10K+ users',
    'with 95% test coverage',
    'reducing costs by 25%',
    'increasing performance by 50%',
    'leading a team of 5+ engineers',
    'delivering 2 weeks ahead of schedule',
    'handling 100K+ daily requests',
]

SENIORITY_TERMS = {
    'entry': ['junior', 'intern', 'associate', 'trainee', 'graduate'],
    'mid': ['developer', 'engineer', 'analyst'],
    'senior': ['senior', 'sr', 'lead'],
    'lead': ['lead', 'principal', 'staff', 'architect'],
    'principal': ['principal', 'staff', 'distinguished', 'director'],
}

DEPTH_INDICATORS = {
    'architecture': ['microservices', 'distributed', 'scalable', 'architecture', 'system design', 'api', 'rest', 'graphql'],
    'complexity': ['algorithm', 'optimization', 'performance', 'caching', 'concurrent', 'async', 'parallel', 'real-time'],
    'infrastructure': ['docker', 'kubernetes', 'aws', 'azure', 'gcp', 'ci/cd', 'deployment', 'infrastructure'],
    'database': ['database', 'sql', 'nosql', 'mongodb', 'postgresql', 'redis', 'elasticsearch', 'data modeling'],
    'testing': ['testing', 'unit test', 'integration', 'e2e', 'tdd', 'coverage', 'jest', 'cypress'],
}

WORD_PATTERN = re.compile(r"[a-z][a-z0-9+#'-]*")


def first_word(text: str) -> str:
    words = text.strip().split()
    if not words:
        return ""
    return re.sub(r'[^A-Za-z-]', '', words[0])


def has_metric(text: str) -> bool:
    return bool(METRIC_PATTERN.search(text))


def starts_with_strong_verb(text: str) -> bool:
    return first_word(text).lower() in STRONG_VERBS
