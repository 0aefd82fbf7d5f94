# tests/test_fixes.py
import pytest

from resume_optimizer.models import ResumeDocument, WorkExperience, SkillCategory, Project
from resume_optimizer.ats.models import JobRequirementProfile, Seniority
from resume_optimizer.ats.vocabulary import has_metric, starts_with_strong_verb
from resume_optimizer.optimizer.fixes import (
    FixContext, strengthen_opening, format_bullet, preferred_title, apply_rank,
    fix_action_verbs, fix_quantified_results, fix_chronology, fix_tools_versions,
    fix_hard_skills, fix_section_completeness, fix_contact_title,
)


def _resume(bullets):
    return ResumeDocument(work_experience=[WorkExperience(role='Engineer', company='Acme', bullets=list(bullets))])


def test_weak_openers_are_replaced():
    assert strengthen_opening("Worked on the billing service", 0) == "Developed the billing service"
    assert strengthen_opening("Responsible for on-call rotation", 0) == "Oversaw on-call rotation"
    assert strengthen_opening("Architected the data layer", 3) == "Architected the data layer"


@pytest.mark.parametrize('bullet,expected', [
    ("I worked on the API.", "Developed the API."),
    ("We built the CI pipeline", "Built the CI pipeline"),
    ("they handled incident triage", "Managed incident triage"),
])
def test_leading_pronoun_is_dropped(bullet, expected):
    assert strengthen_opening(bullet, 0) == expected
    assert strengthen_opening(expected, 0) == expected


def test_verbs_rotate_by_position():
    first = strengthen_opening("the release process", 0)
    second = strengthen_opening("the release process", 1)
    assert first != second
    assert starts_with_strong_verb(first) and starts_with_strong_verb(second)


def test_action_verb_fix(devops_profile):
    resume = _resume(["Worked on dashboards", "Built the API gateway"])
    outcome = fix_action_verbs(resume, FixContext(devops_profile))
    bullets = outcome.resume.work_experience[0].bullets
    assert bullets == ["Developed dashboards", "Built the API gateway"]
    assert len(outcome.changes) == 1
    assert outcome.changes[0].before == "Worked on dashboards"
    assert resume.work_experience[0].bullets[0] == "Worked on dashboards"


def test_metric_clause_is_appended(devops_profile):
    resume = _resume(["Migrated services to containers.", "Served 2 million users"])
    outcome = fix_quantified_results(resume, FixContext(devops_profile))
    bullets = outcome.resume.work_experience[0].bullets
    assert has_metric(bullets[0])
    assert bullets[0].startswith("Migrated services to containers, ")
    assert bullets[1] == "Served 2 million users"


def test_format_bullet():
    assert format_bullet("  built   the   api  ") == "Built the api, demonstrating strong technical expertise."
    assert format_bullet("- Designed a cache layer for the search service") == \
        "Designed a cache layer for the search service."
    assert format_bullet("") == ""


def test_chronology_fix(devops_profile):
    resume = ResumeDocument(work_experience=[WorkExperience(role='Engineer', company='Acme', year='2019 - 2021')])
    outcome = fix_chronology(resume, FixContext(devops_profile))
    assert outcome.resume.work_experience[0].year == 'Jan 2019 - Dec 2021'
    assert outcome.changes[0].after == 'Jan 2019 - Dec 2021'


def test_tool_versions_keep_skill_recognizable(devops_profile):
    resume = ResumeDocument(skills=[SkillCategory('Programming Languages', ['Python', 'Java 11'])])
    outcome = fix_tools_versions(resume, FixContext(devops_profile))
    skills = outcome.resume.skills[0].skills
    assert skills == ['Python 3.11', 'Java 11']
    assert 'python' in " ".join(skills).lower()


def test_hard_skills_go_to_taxonomy_category(sample_resume, devops_profile):
    outcome = fix_hard_skills(sample_resume, FixContext(devops_profile))
    devops = outcome.resume.find_category('Cloud & DevOps')
    assert devops.contains('Kubernetes')
    assert devops.contains('Terraform')
    assert not sample_resume.find_category('Cloud & DevOps').contains('Kubernetes')


def test_empty_experience_gets_placeholder_bullets(devops_profile):
    resume = ResumeDocument(work_experience=[WorkExperience(role='Engineer', company='Acme')])
    outcome = fix_section_completeness(resume, FixContext(devops_profile))
    bullets = outcome.resume.work_experience[0].bullets
    assert len(bullets) == 3
    assert 'Acme' in bullets[0]


def test_target_role_uses_profile_seniority(devops_profile):
    assert preferred_title(devops_profile) == 'Senior DevOps Engineer'
    assert preferred_title(devops_profile, 'Platform Engineer') == 'Senior Platform Engineer'
    mid = JobRequirementProfile(role_title='Data Analyst', seniority=Seniority.MID)
    assert preferred_title(mid) == 'Data Analyst'


def test_contact_title_fix_sets_role(devops_profile):
    resume = ResumeDocument(projects=[Project(title='Side project')])
    outcome = fix_contact_title(resume, FixContext(devops_profile))
    assert outcome.resume.target_role == 'Senior DevOps Engineer'
    assert resume.target_role == ''


def test_keyword_fixes_apply_first():
    order = sorted(range(1, 17), key=apply_rank)
    assert order[:3] == [4, 5, 10]
    assert order.index(2) > order.index(4)
