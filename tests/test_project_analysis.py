# tests/test_project_analysis.py
import copy
from unittest.mock import MagicMock

import pytest

from resume_optimizer.models import ResumeDocument, Project
from resume_optimizer.ats.models import (
    JobRequirementProfile, RequirementKeyword, KeywordCategory, Importance, Seniority,
)
from resume_optimizer.errors import ExternalServiceError
from resume_optimizer.pipeline.project_analysis import (
    ProjectAnalyzer, alignment_score, find_project_index, apply_project_modifications, suggest_projects,
)
from resume_optimizer.pipeline.validation import ProjectModificationsInput


def _keyword(term, display, category=KeywordCategory.DEVOPS):
    return RequirementKeyword(term, display, category, Importance.HIGH)


PLATFORM_PROFILE = JobRequirementProfile(
    role_title='Platform Engineer',
    seniority=Seniority.MID,
    keywords=(
        _keyword('docker', 'Docker'),
        _keyword('kubernetes', 'Kubernetes'),
        _keyword('container', 'Container'),
        _keyword('deployment', 'Deployment'),
    ),
)

HOMELAB = Project(
    title='Homelab',
    bullets=['Deployed containers with Docker on a home server'],
    tech_stack=['Docker'],
)
RECIPES = Project(title='Recipe Blog', bullets=['Wrote recipes in HTML'], tech_stack=['HTML'])


@pytest.fixture
def resume():
    return ResumeDocument(projects=[copy.deepcopy(HOMELAB), copy.deepcopy(RECIPES)])


def test_alignment_matches_stemmed_terms():
    score, matched = alignment_score(HOMELAB, PLATFORM_PROFILE)
    assert score == 0.75
    assert matched == ['Docker', 'Container', 'Deployment']


def test_alignment_bounds():
    score, matched = alignment_score(RECIPES, PLATFORM_PROFILE)
    assert score == 0.0
    assert matched == []


def test_empty_profile_is_neutral():
    profile = JobRequirementProfile(role_title='Engineer', seniority=Seniority.MID)
    assert alignment_score(HOMELAB, profile) == (0.5, [])


def test_analyzer_flags_unrelated_project(resume):
    analysis = ProjectAnalyzer().analyze(resume, PLATFORM_PROFILE)
    homelab, recipes = analysis.assessments
    assert homelab.suitable
    assert not recipes.suitable
    assert 'Kubernetes' in recipes.suggestion
    assert analysis.suitable_count == 1
    assert len(analysis.suggested_projects) == 1
    assert analysis.to_dict()['unsuitable_projects'] == 1


def test_generative_verdicts_override(resume):
    client = MagicMock()
    client.generate_json.return_value = [{'suitable': False, 'reason': 'Too simple'}, {'suitable': True}]
    analysis = ProjectAnalyzer(client).analyze(resume, PLATFORM_PROFILE)
    assert [a.suitable for a in analysis.assessments] == [False, True]
    assert analysis.assessments[0].reason == 'Too simple'
    assert not analysis.fallback


def test_generative_failure_keeps_deterministic_verdicts(resume):
    client = MagicMock()
    client.generate_json.side_effect = ExternalServiceError('down')
    analysis = ProjectAnalyzer(client).analyze(resume, PLATFORM_PROFILE)
    assert [a.suitable for a in analysis.assessments] == [True, False]
    assert analysis.fallback


def test_suggestions_use_hard_skills():
    suggestions = suggest_projects(PLATFORM_PROFILE, 2)
    assert len(suggestions) == 2
    assert suggestions[0]['tech_stack'] == ['Docker', 'Kubernetes', 'Container']
    assert suggest_projects(PLATFORM_PROFILE, 0) == []


def test_find_project_index():
    projects = [Project(title='Homelab Cluster'), Project(title='Recipe Blog')]
    assert find_project_index(projects, 'homelab cluster') == 0
    assert find_project_index(projects, 'Homelab Clustr') == 0
    assert find_project_index(projects, 'Recipe Blog ') == 1
    assert find_project_index(projects, 'Unrelated') is None
    assert find_project_index([], 'Homelab') is None


def test_apply_modifications(resume):
    modifications = ProjectModificationsInput.model_validate({
        'removedProjectTitles': ['recipe blog'],
        'addedProjects': [{
            'title': 'Kubernetes Platform',
            'bullets': 'Built a k3s cluster with GitOps deployments\nAutomated backups',
            'techStack': 'Kubernetes, Helm',
        }],
        'replacedProjects': [{
            'originalTitle': 'Missing Project',
            'title': 'Metrics Stack',
            'bullets': ['Deployed Prometheus and Grafana dashboards'],
        }],
        'modifiedProjects': [{'title': 'Homelab', 'techStack': ['Docker', 'Proxmox']}],
    })
    updated, changes = apply_project_modifications(resume, modifications)

    assert [p.title for p in updated.projects] == ['Homelab', 'Kubernetes Platform', 'Metrics Stack']
    assert updated.projects[1].tech_stack == ['Kubernetes', 'Helm']
    assert updated.projects[1].bullets == ['Built a k3s cluster with GitOps deployments', 'Automated backups']
    assert updated.projects[0].tech_stack == ['Docker', 'Proxmox']
    assert updated.projects[0].bullets == HOMELAB.bullets
    assert "Removed 1 project(s): Recipe Blog" in changes
    assert any("no project named 'Missing Project'" in c for c in changes)
    assert len(resume.projects) == 2


def test_no_modifications_keeps_projects(resume):
    updated, changes = apply_project_modifications(resume, ProjectModificationsInput())
    assert [p.title for p in updated.projects] == ['Homelab', 'Recipe Blog']
    assert changes == ["Kept existing projects"]
