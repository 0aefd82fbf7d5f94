# tests/test_bullets.py
from resume_optimizer.models import ResumeDocument, WorkExperience, Project
from resume_optimizer.pipeline.bullets import (
    apply_action_context_result, apply_tech_impact_metrics, validate_bullet_formatting,
    is_compliant_experience_bullet, is_compliant_project_bullet,
)


def test_action_context_result():
    bullet = apply_action_context_result("worked on the billing service", 0)
    assert bullet == "Developed the billing service, improving efficiency by 40%."
    assert is_compliant_experience_bullet(bullet)


def test_tech_impact_metrics():
    project = Project(title='Homelab', tech_stack=['Docker', 'Linux'])
    bullet = apply_tech_impact_metrics("Built a homelab", project, 1)
    assert bullet == "Built a homelab using Docker and Linux, reducing development time by 30%."
    assert is_compliant_project_bullet(bullet, project)


def test_existing_tech_and_metric_are_kept():
    project = Project(title='Homelab', tech_stack=['Docker'])
    bullet = apply_tech_impact_metrics("Launched 6 Docker services serving 200 users", project, 0)
    assert bullet == "Launched 6 Docker services serving 200 users."


def test_empty_bullet_is_left_alone():
    assert apply_action_context_result("   ", 0) == "   "
    assert apply_tech_impact_metrics("", Project(), 0) == ""


def test_compliance_report():
    resume = ResumeDocument(
        work_experience=[WorkExperience(bullets=[
            "Developed the billing service for finance teams, improving efficiency by 40%.",
            "stuff",
        ])],
        projects=[Project(title='Homelab', tech_stack=['Docker'], bullets=[
            "Deployed 6 Docker services on one node, reducing costs by 25%.",
        ])],
    )
    compliance = validate_bullet_formatting(resume)
    assert compliance.total == 3
    assert compliance.compliant == 2
    assert compliance.compliance_score == 0.67
    assert not compliance.format_compliance
    assert compliance.issues == ["Experience 1, bullet 2: missing action, context or result"]


def test_no_bullets_is_fully_compliant():
    compliance = validate_bullet_formatting(ResumeDocument())
    assert compliance.compliance_score == 1.0
    assert compliance.format_compliance
