# tests/test_optimizer.py
import dataclasses

from resume_optimizer.errors import ConvergenceIncomplete
from resume_optimizer.models import ResumeDocument, ContactInfo, SkillCategory, WorkExperience
from resume_optimizer.ats.jd_extractor import JDExtractor
from resume_optimizer.ats.scorer import ResumeScorer
from resume_optimizer.ats.parameters import PARAMETERS_BY_ID
from resume_optimizer.optimizer.convergence import ConvergenceOptimizer, optimize_resume
from resume_optimizer.optimizer.fixes import FIX_REGISTRY, FixContext


def test_registry_covers_every_parameter():
    assert sorted(FIX_REGISTRY) == list(range(1, 17))


def test_overall_never_decreases(sample_resume, devops_profile, config):
    result = ConvergenceOptimizer(config).optimize(sample_resume, devops_profile)
    assert result.overall_after >= result.overall_before

    committed = [e.data['overall'] for e in result.diagnostics.for_stage('optimizer')
                 if e.message == 'iteration committed']
    assert committed == sorted(committed)


def test_input_resume_is_not_modified(sample_resume, devops_profile, config):
    before = sample_resume.to_dict()
    ConvergenceOptimizer(config).optimize(sample_resume, devops_profile)
    assert sample_resume.to_dict() == before


def test_missing_critical_keyword_is_closed_in_one_iteration(sample_resume, devops_profile, config):
    scorer = ResumeScorer(config)
    initial = scorer.score(sample_resume, devops_profile)
    assert 'kubernetes' not in sample_resume.full_text().lower()
    assert initial.get(4).percentage < 90

    single = dataclasses.replace(config, max_iterations=1)
    result = ConvergenceOptimizer(single).optimize(sample_resume, devops_profile, initial_report=initial)

    assert result.iterations == 1
    assert 'Kubernetes' in result.rewritten_resume.full_text()
    assert result.after_scores.get(4).percentage >= 90


def test_devops_end_to_end(config):
    jd = "AWS, Docker, Kubernetes (must have). " * 5
    profile = JDExtractor(config).extract(jd, "DevOps Engineer")
    resume = ResumeDocument(
        contact=ContactInfo(name='Riley Chen', email='riley@example.com', phone='555-010-2030'),
        skills=[SkillCategory('Programming Languages', ['Java'])],
        work_experience=[WorkExperience(
            role='Developer',
            company='Initech',
            year='2018 - 2022',
            bullets=['Maintained internal reporting tools'],
        )],
    )

    before = ResumeScorer(config).score(resume, profile)
    assert before.get(4).score == 0

    result = optimize_resume(resume, profile, config=config)
    devops = result.rewritten_resume.find_category('Cloud & DevOps')
    assert devops is not None
    skills = " ".join(devops.skills)
    for term in ('AWS', 'Docker', 'Kubernetes'):
        assert term in skills
    assert result.after_scores.get(4).percentage >= 90
    assert result.overall_after > result.overall_before


def test_changes_are_logged_with_parameter(sample_resume, devops_profile, config):
    result = ConvergenceOptimizer(config).optimize(sample_resume, devops_profile)
    assert result.changes_applied
    labels = {spec.label for spec in PARAMETERS_BY_ID.values()}
    for change in result.changes_applied:
        assert change.parameter in labels
        assert change.description
    assert result.processing_time >= 0


def test_fix_is_noop_when_parameter_is_full(sample_resume, devops_profile):
    ctx = FixContext(profile=devops_profile)
    for parameter_id, strategy in FIX_REGISTRY.items():
        spec = PARAMETERS_BY_ID[parameter_id]
        points, _ = spec.metric(sample_resume, devops_profile)
        if points >= spec.native_max:
            outcome = strategy.run(sample_resume, ctx)
            assert outcome.resume is sample_resume
            assert not outcome.changed


def test_hard_skill_fix_is_idempotent(sample_resume, devops_profile):
    strategy = FIX_REGISTRY[4]
    ctx = FixContext(profile=devops_profile)
    first = strategy.run(sample_resume, ctx)
    assert first.changed
    second = strategy.run(first.resume, ctx)
    assert not second.changed
    assert second.resume is first.resume


def test_incomplete_convergence_is_reported_not_raised(devops_profile, config):
    resume = ResumeDocument(contact=ContactInfo(name='Sam Doe', email='sam@example.com'))
    single = dataclasses.replace(config, max_iterations=1)
    result = ConvergenceOptimizer(single).optimize(resume, devops_profile)

    assert not result.converged
    assert len(result.warnings) == 1
    warning = result.warnings[0]
    assert isinstance(warning, ConvergenceIncomplete)
    assert 16 in warning.failing
    assert warning.to_dict()['labels']


def test_abort_before_first_iteration(sample_resume, devops_profile, config):
    result = ConvergenceOptimizer(config).optimize(
        sample_resume, devops_profile, should_abort=lambda: True
    )
    assert result.aborted
    assert result.changes_applied == []
    assert result.iterations == 0


def test_abort_mid_iteration_discards_changes(sample_resume, devops_profile, config):
    calls = []

    def should_abort():
        calls.append(1)
        return len(calls) > 1

    result = ConvergenceOptimizer(config).optimize(sample_resume, devops_profile, should_abort=should_abort)
    assert result.aborted
    assert result.changes_applied == []
    assert result.overall_after >= result.overall_before


def test_iteration_cap_is_respected(sample_resume, devops_profile, config):
    result = ConvergenceOptimizer(dataclasses.replace(config, max_iterations=2)).optimize(
        sample_resume, devops_profile
    )
    assert result.iterations <= 2


def test_result_serializes(sample_resume, devops_profile, config):
    data = ConvergenceOptimizer(config).optimize(sample_resume, devops_profile).to_dict()
    assert set(data) >= {'rewritten_resume', 'before_scores', 'after_scores', 'changes_applied',
                         'processing_time', 'iterations', 'warnings', 'diagnostics'}
