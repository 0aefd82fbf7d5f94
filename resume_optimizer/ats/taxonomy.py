# resume_optimizer/ats/taxonomy.py
"""
Skill taxonomy: category names, categorization and display formatting
"""
import logging
from typing import List, Optional

from resume_optimizer.models import SkillCategory

logger = logging.getLogger(__name__)


class SkillCategories:
    PROGRAMMING_LANGUAGES = "Programming Languages"
    FRONTEND = "Frontend Technologies"
    BACKEND = "Backend Technologies"
    DATABASES = "Databases"
    CLOUD_DEVOPS = "Cloud & DevOps"
    DATA_SCIENCE_ML = "Data Science & ML"
    TOOLS_PLATFORMS = "Tools & Platforms"
    TESTING_QA = "Testing & QA"
    SOFT_SKILLS = "Soft Skills"


# Display order used when finalizing a skills section
CATEGORY_ORDER = [
    SkillCategories.PROGRAMMING_LANGUAGES,
    SkillCategories.FRONTEND,
    SkillCategories.BACKEND,
    SkillCategories.DATABASES,
    SkillCategories.CLOUD_DEVOPS,
    SkillCategories.DATA_SCIENCE_ML,
    SkillCategories.TESTING_QA,
    SkillCategories.TOOLS_PLATFORMS,
    SkillCategories.SOFT_SKILLS,
]

LANGUAGES = {
    'java', 'python', 'javascript', 'typescript', 'c++', 'c#', 'c', 'go', 'golang',
    'rust', 'ruby', 'php', 'swift', 'kotlin', 'scala', 'r', 'matlab', 'perl',
    'html', 'css', 'sql', 'bash', 'shell', 'dart', 'objective-c',
}

FRONTEND = {
    'react', 'angular', 'vue', 'svelte', 'next.js', 'nuxt', 'gatsby', 'redux',
    'mobx', 'zustand', 'recoil', 'tailwind', 'bootstrap', 'material ui',
    'chakra ui', 'ant design', 'sass', 'scss', 'less', 'styled-components',
    'webpack', 'vite', 'rollup', 'parcel', 'esbuild', 'babel', 'html5', 'css3',
    'jquery', 'react native', 'flutter',
}

BACKEND = {
    'node.js', 'express', 'nestjs', 'spring', 'spring boot', 'django', 'flask',
    'fastapi', 'laravel', 'rails', 'asp.net', '.net core', 'graphql', 'rest api',
    'restful', 'grpc', 'microservices', 'kafka', 'rabbitmq', 'api gateway',
    'serverless', 'hibernate', 'celery',
}

DATABASES = {
    'mysql', 'postgresql', 'mongodb', 'redis', 'cassandra', 'dynamodb',
    'elasticsearch', 'oracle', 'sql server', 'mariadb', 'couchdb', 'neo4j',
    'sqlite', 'firebase', 'snowflake',
}

CLOUD_DEVOPS = {
    'aws', 'azure', 'gcp', 'google cloud', 'amazon web services', 'microsoft azure',
    'ec2', 's3', 'lambda', 'rds', 'eks', 'ecs', 'cloudformation', 'azure functions',
    'app service', 'blob storage', 'compute engine', 'cloud run', 'cloud functions',
    'gke', 'docker', 'kubernetes', 'jenkins', 'gitlab ci', 'github actions',
    'terraform', 'ansible', 'puppet', 'chef', 'circleci', 'travis ci', 'helm',
    'prometheus', 'grafana', 'elk', 'datadog', 'new relic', 'ci/cd', 'linux',
    'nginx', 'openshift', 'argocd',
}

DATA_SCIENCE_ML = {
    'tensorflow', 'pytorch', 'scikit-learn', 'pandas', 'numpy', 'hadoop', 'spark',
    'machine learning', 'deep learning', 'nlp', 'computer vision', 'data science',
    'keras', 'airflow', 'big data', 'artificial intelligence', 'mlops',
}

TESTING_QA = {
    'jest', 'mocha', 'cypress', 'playwright', 'react testing library', 'vitest',
    'selenium', 'pytest', 'junit', 'tdd', 'unit testing', 'integration testing',
}

SOFT_SKILLS = {
    'leadership', 'communication', 'collaboration', 'problem solving', 'analytical',
    'teamwork', 'agile', 'scrum', 'mentoring', 'cross-functional',
    'stakeholder management', 'time management', 'adaptability',
}

# Lookup order matters: a term is placed in the first category that lists it
_CATEGORY_LOOKUP = [
    (SkillCategories.DATA_SCIENCE_ML, DATA_SCIENCE_ML),
    (SkillCategories.FRONTEND, FRONTEND),
    (SkillCategories.BACKEND, BACKEND),
    (SkillCategories.DATABASES, DATABASES),
    (SkillCategories.TESTING_QA, TESTING_QA),
    (SkillCategories.CLOUD_DEVOPS, CLOUD_DEVOPS),
    (SkillCategories.PROGRAMMING_LANGUAGES, LANGUAGES),
    (SkillCategories.SOFT_SKILLS, SOFT_SKILLS),
]

SPECIAL_NAMES = {
    'javascript': 'JavaScript',
    'typescript': 'TypeScript',
    'nodejs': 'Node.js',
    'node.js': 'Node.js',
    'node': 'Node.js',
    'reactjs': 'React',
    'react.js': 'React',
    'react': 'React',
    'vue.js': 'Vue.js',
    'vue': 'Vue',
    'angular': 'Angular',
    'next.js': 'Next.js',
    'nestjs': 'NestJS',
    'express': 'Express',
    'aws': 'AWS',
    'gcp': 'GCP',
    'azure': 'Azure',
    'html': 'HTML',
    'html5': 'HTML5',
    'css': 'CSS',
    'css3': 'CSS3',
    'scss': 'SCSS',
    'sql': 'SQL',
    'mysql': 'MySQL',
    'postgresql': 'PostgreSQL',
    'postgres': 'PostgreSQL',
    'mongodb': 'MongoDB',
    'dynamodb': 'DynamoDB',
    'graphql': 'GraphQL',
    'grpc': 'gRPC',
    'rest api': 'REST API',
    'restful': 'RESTful',
    'api': 'API',
    'ci/cd': 'CI/CD',
    'gitlab ci': 'GitLab CI',
    'github actions': 'GitHub Actions',
    'circleci': 'CircleCI',
    'ec2': 'EC2',
    's3': 'S3',
    'eks': 'EKS',
    'ecs': 'ECS',
    'gke': 'GKE',
    'rds': 'RDS',
    'elk': 'ELK',
    'nlp': 'NLP',
    'php': 'PHP',
    'c#': 'C#',
    'c++': 'C++',
    'asp.net': 'ASP.NET',
    '.net core': '.NET Core',
    'pytorch': 'PyTorch',
    'tensorflow': 'TensorFlow',
    'scikit-learn': 'scikit-learn',
    'numpy': 'NumPy',
    'fastapi': 'FastAPI',
    'rabbitmq': 'RabbitMQ',
    'cloudformation': 'CloudFormation',
    'argocd': 'Argo CD',
    'sql server': 'SQL Server',
    'mariadb': 'MariaDB',
    'couchdb': 'CouchDB',
    'neo4j': 'Neo4j',
    'ios': 'iOS',
    'tdd': 'TDD',
    'mlops': 'MLOps',
}


def format_skill_name(skill: str) -> str:
    """Canonical display form of a skill ('postgres' -> 'PostgreSQL')"""
    term = skill.strip()
    lower = term.lower()
    if lower in SPECIAL_NAMES:
        return SPECIAL_NAMES[lower]
    if term != lower:
        # Caller already chose a casing
        return term
    return " ".join(w if w.isupper() else w[:1].upper() + w[1:] for w in term.split())


def categorize_skill(skill: str) -> Optional[str]:
    """Return the taxonomy category for a skill, or None if unknown"""
    lower = skill.strip().lower()
    for category, terms in _CATEGORY_LOOKUP:
        if lower in terms:
            return category
    return None


def finalize_skill_categories(categories: List[SkillCategory]) -> List[SkillCategory]:
    """
    Clean up a skills section.

    Merges categories that differ only by case, drops empty ones and puts
    known categories in canonical order. Custom categories keep their
    relative order after the known ones.

    Returns:
        New list of SkillCategory objects
    """
    merged = {}
    for category in categories:
        key = category.category.strip().lower()
        if not key:
            continue
        if key not in merged:
            merged[key] = SkillCategory(category.category.strip(), [])
        for skill in category.skills:
            merged[key].add(skill)

    known = [c.lower() for c in CATEGORY_ORDER]
    ordered = [merged[k] for k in known if k in merged and merged[k].skills]
    ordered += [c for k, c in merged.items() if k not in known and c.skills]

    logger.debug(f"Finalized {len(ordered)} skill categories")
    return ordered
