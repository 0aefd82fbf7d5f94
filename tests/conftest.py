# tests/conftest.py
import copy

import pytest

from resume_optimizer.config import EngineConfig, LLMConfig
from resume_optimizer.normalizer import normalize_resume
from resume_optimizer.ats.jd_extractor import JDExtractor


SAMPLE_RESUME = {
    'contact': {
        'name': 'Jordan Lee',
        'email': 'jordan.lee@example.com',
        'phone': '+1 (555) 123-4567',
        'linkedin': 'linkedin.com/in/jordanlee',
        'github': 'github.com/jordanlee',
    },
    'target_role': 'Software Engineer',
    'summary': 'Engineer with 4 years of experience building backend services in Python.',
    'skills': [
        {'category': 'Programming Languages', 'list': ['Python', 'Bash']},
        {'category': 'Cloud & DevOps', 'list': ['Docker', 'AWS', 'Linux']},
    ],
    'work_experience': [
        {
            'role': 'Software Engineer',
            'company': 'Acme Corp',
            'year': '2021 - Present',
            'bullets': [
                'Worked on deployment scripts for internal services',
                'Built monitoring dashboards used by 12 engineers',
                'Responsible for migrating services to AWS',
            ],
        },
        {
            'role': 'Junior Developer',
            'company': 'Widgets Inc',
            'year': 'June 2019 to December 2020',
            'bullets': [
                'Helped maintain the billing application',
                'Developed REST endpoints in Python',
            ],
        },
    ],
    'projects': [
        {
            'title': 'Homelab Cluster',
            'bullets': ['Set up a Docker based homelab running 6 services'],
            'tech_stack': ['Docker', 'Linux'],
        },
        {
            'title': 'Recipe Blog',
            'bullets': ['Wrote a static blog about cooking'],
            'tech_stack': ['HTML', 'CSS'],
        },
    ],
    'education': [
        {'degree': 'B.S. Computer Science', 'school': 'State University', 'year': '2019'},
    ],
    'certifications': ['AWS Certified Cloud Practitioner'],
}

DEVOPS_JD = """Senior DevOps Engineer

We are seeking a Senior DevOps Engineer to scale our cloud platform.

Requirements:
- 5+ years of experience operating production infrastructure on AWS
- Kubernetes is a must have; you will run Kubernetes clusters daily
- Strong Terraform and Docker experience
- Scripting in Python or Bash
- Build CI/CD pipelines with Jenkins

Nice to have:
- Familiarity with Prometheus and Grafana
- Helm

Collaboration and communication with development teams.
"""


@pytest.fixture
def resume_data():
    return copy.deepcopy(SAMPLE_RESUME)


@pytest.fixture
def sample_resume(resume_data):
    return normalize_resume(resume_data)


@pytest.fixture
def config():
    return EngineConfig(llm=LLMConfig(max_attempts=2, backoff_min=0, backoff_max=0))


@pytest.fixture
def devops_profile(config):
    return JDExtractor(config).extract(DEVOPS_JD)
