# tests/test_pipeline.py
import copy
import json
import dataclasses
from unittest.mock import MagicMock

import pytest
import requests

from conftest import DEVOPS_JD
from resume_optimizer.ai.client import GenerativeClient
from resume_optimizer.ai.rewriter import BulletRewriter
from resume_optimizer.pipeline.bullets import apply_action_context_result
from resume_optimizer.pipeline.controller import PipelineController, identify_missing_sections
from resume_optimizer.pipeline.steps import PipelineStep, StepStatus

KUBERNETES_PROJECT = {
    'title': 'Kubernetes Platform',
    'bullets': ['Built a Kubernetes cluster with Helm charts and Terraform modules'],
    'tech_stack': ['Kubernetes', 'Helm', 'Terraform'],
}


@pytest.fixture
def controller(config):
    return PipelineController(DEVOPS_JD, config=config, session_id='test-session')


def _run_to(controller, resume_data, last_step):
    """Run steps 1..last_step with default inputs"""
    results = {}
    for step in range(1, last_step + 1):
        if step == 1:
            results[step] = controller.execute_step(1, {'resume': resume_data})
        elif step == 4:
            results[step] = controller.execute_step(4, {
                'removedProjectTitles': ['Recipe Blog'],
                'addedProjects': [KUBERNETES_PROJECT],
            })
        else:
            results[step] = controller.execute_step(step)
        assert results[step].success, results[step].error
    return results


def test_full_run(controller, resume_data):
    first = controller.execute_step(PipelineStep.PARSE_RESUME, {'resume': resume_data})
    assert first.success
    assert first.next_step == PipelineStep.ANALYZE_AGAINST_JD
    assert first.data['missing_sections'] == []
    assert first.data['parsing_confidence'] == 1.0

    analysis = controller.execute_step(2)
    assert 'Kubernetes' in analysis.data['missing_keywords']
    assert analysis.data['before_score']['overall'] > 0

    # Nothing missing, so step 3 completes without input
    sections = controller.execute_step(3)
    assert sections.success
    assert not sections.user_input_required
    assert sections.next_step == PipelineStep.PROJECT_ANALYSIS

    query = controller.execute_step(4)
    assert query.user_input_required
    assert query.next_step is None
    assert controller.get_state().user_input_required
    assert controller.get_progress().user_action_required
    titles = [p['title'] for p in query.data['project_analysis']['projects']]
    assert titles == ['Homelab Cluster', 'Recipe Blog']

    applied = controller.execute_step(4, {
        'removedProjectTitles': ['Recipe Blog'],
        'addedProjects': [KUBERNETES_PROJECT],
    })
    assert applied.success
    assert [p['title'] for p in applied.data['updated_resume_data']['projects']] == \
        ['Homelab Cluster', 'Kubernetes Platform']

    reanalysis = controller.execute_step(5)
    assert reanalysis.data['previous_overall'] is not None
    assert set(reanalysis.data['parameter_deltas']) == set(range(1, 17))

    rewriting = controller.execute_step(6)
    assert rewriting.success
    assert not rewriting.data['fallback_used']
    assert 0.0 <= rewriting.data['compliance_score'] <= 1.0

    final = controller.execute_step(7)
    assert final.success
    assert final.next_step == PipelineStep.OUTPUT_RESUME
    assert final.data['ats_score'] >= analysis.data['before_score']['overall']

    output = controller.execute_step(8)
    assert output.success
    assert output.next_step is None
    comparison = output.data['before_after_comparison']
    assert comparison['after'] > comparison['before']
    assert len(comparison['parameters']) == 16
    exports = output.data['exports']
    assert set(exports) == {'dict', 'json', 'text'}
    assert json.loads(exports['json'])['contact']['name'] == 'Jordan Lee'
    assert exports['text'].startswith('Jordan Lee')
    assert output.data['summary']['steps_completed'] == 8

    history = controller.snapshots.all()
    assert [s.version for s in history] == [1, 2, 3, 4]
    assert [s.step for s in history] == [
        PipelineStep.PARSE_RESUME,
        PipelineStep.PROJECT_ANALYSIS,
        PipelineStep.BULLET_REWRITING,
        PipelineStep.FINAL_OPTIMIZATION,
    ]
    assert controller.get_state().progress_percentage == 100


def _failing_session(kind):
    session = MagicMock(spec=requests.Session)
    if kind == 'unreachable':
        session.post.side_effect = requests.ConnectionError('refused')
    else:
        session.post.return_value.json.return_value = []
    return session


@pytest.mark.parametrize('kind', ['unreachable', 'malformed'])
def test_bullet_rewriting_falls_back_when_provider_fails(config, resume_data, kind):
    session = _failing_session(kind)
    rewriter = BulletRewriter(GenerativeClient(config.llm, session=session))
    controller = PipelineController(DEVOPS_JD, config=config, rewriter=rewriter)
    _run_to(controller, resume_data, 5)
    before = controller.latest_snapshot.restore()
    snapshots = len(controller.snapshots)

    result = controller.execute_step(6)

    assert result.success, result.error
    assert result.data['fallback_used']
    assert result.next_step == PipelineStep.FINAL_OPTIMIZATION
    assert len(controller.snapshots) == snapshots + 1
    assert controller.latest_snapshot.step == PipelineStep.BULLET_REWRITING
    assert session.post.called

    position = 0
    rewritten = controller.latest_snapshot.restore()
    for original, updated in zip(before.work_experience, rewritten.work_experience):
        expected = [apply_action_context_result(b, position + j) for j, b in enumerate(original.bullets)]
        assert updated.bullets == expected
        position += len(original.bullets)


def test_validation_failure_changes_nothing(controller, resume_data):
    _run_to(controller, resume_data, 3)
    snapshots = len(controller.snapshots)
    history = len(controller.step_history)
    errors = len(controller.error_log)

    result = controller.execute_step(4, {'addedProjects': [{'title': 'AB', 'bullets': []}]})

    assert not result.success
    assert result.error == 'validation failed'
    fields = [e['field'] for e in result.data['validation_errors']]
    assert fields == ['added_projects[0].title', 'added_projects[0].bullets']
    assert all(e['remedy'] for e in result.data['validation_errors'])
    assert result.data['fallback_analysis']['latest_version'] == snapshots
    assert len(controller.snapshots) == snapshots
    assert len(controller.step_history) == history
    assert len(controller.error_log) == errors


def test_parse_requires_input(controller):
    result = controller.execute_step(1)
    assert not result.success
    assert result.error == 'validation failed'
    assert result.data['validation_errors'][0]['field'] == 'input'

    empty = controller.execute_step(1, {'resumeText': '   '})
    assert empty.data['validation_errors'][0]['field'] == 'resume'
    assert len(controller.snapshots) == 0


def test_wrong_input_type_is_rejected(controller):
    result = controller.execute_step(1, ['not', 'a', 'mapping'])
    assert result.error == 'validation failed'


def test_missing_sections_flow(controller, resume_data):
    del resume_data['projects']
    _run_to(controller, resume_data, 2)

    query = controller.execute_step(3)
    assert query.user_input_required
    assert query.data['required_sections'] == ['projects']

    refused = controller.execute_step(3, {'skippedSections': []})
    assert refused.error == 'validation failed'
    assert [e['field'] for e in refused.data['validation_errors']] == ['projects']

    provided = controller.execute_step(3, {'projects': [KUBERNETES_PROJECT]})
    assert provided.success
    assert provided.data['remaining_missing_sections'] == []
    assert controller.latest_snapshot.restore().projects[0].title == 'Kubernetes Platform'
    assert controller.user_inputs[-1].input_type == 'missing_sections'


def test_missing_section_can_be_skipped(controller, resume_data):
    del resume_data['projects']
    _run_to(controller, resume_data, 2)
    result = controller.execute_step(3, {'skippedSections': ['projects']})
    assert result.success
    assert result.next_step == PipelineStep.PROJECT_ANALYSIS
    assert identify_missing_sections(controller.latest_snapshot.restore()) == ['projects']


def test_missing_contact_email_is_validated(controller, resume_data):
    resume_data['contact']['email'] = ''
    _run_to(controller, resume_data, 2)
    bad = controller.execute_step(3, {'contactDetails': {'email': 'nope', 'phone': '123'}})
    fields = {e['field'] for e in bad.data['validation_errors']}
    assert fields == {'contact_details.email', 'contact_details.phone'}

    good = controller.execute_step(3, {'contactDetails': {'email': 'jordan@example.com'}})
    assert good.success
    assert controller.latest_snapshot.restore().contact.email == 'jordan@example.com'
    assert controller.latest_snapshot.restore().contact.name == 'Jordan Lee'


def test_snapshots_are_immutable(controller, resume_data):
    _run_to(controller, resume_data, 1)
    snapshot = controller.latest_snapshot
    restored = snapshot.restore()
    restored.summary = 'changed'
    restored.skills.clear()
    assert controller.latest_snapshot.restore().summary != 'changed'
    assert controller.latest_snapshot.restore().skills

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.version = 99
    assert not hasattr(snapshot, 'resume')


def test_history_exposes_only_copies(controller, resume_data):
    _run_to(controller, resume_data, 2)
    for snapshot in controller.snapshots.all():
        snapshot.restore().contact.name = 'Someone Else'
        snapshot.to_dict()['resume']['contact']['name'] = 'Someone Else'
    assert all(s.restore().contact.name == 'Jordan Lee' for s in controller.snapshots.all())


def test_input_data_is_copied(controller, resume_data):
    original = copy.deepcopy(resume_data)
    _run_to(controller, resume_data, 1)
    resume_data['contact']['name'] = 'Someone Else'
    assert controller.latest_snapshot.restore().contact.name == original['contact']['name']


def test_abort_during_optimization(controller, resume_data):
    _run_to(controller, resume_data, 6)
    snapshots = len(controller.snapshots)

    def abort_on_final_step(state):
        if state.current_step == PipelineStep.FINAL_OPTIMIZATION and not controller.aborted:
            controller.abort()

    controller.on_state_change(abort_on_final_step)
    result = controller.execute_step(7)

    assert not result.success
    assert 'aborted' in result.error
    assert len(controller.snapshots) == snapshots
    assert controller.get_state().aborted

    after = controller.execute_step(8)
    assert after.error == 'pipeline aborted'


def test_rollback(controller, resume_data):
    _run_to(controller, resume_data, 2)
    assert controller.current_step == PipelineStep.MISSING_SECTIONS

    previous = controller.rollback_to_previous_step()
    assert previous == PipelineStep.ANALYZE_AGAINST_JD
    assert controller.get_state().completed_steps == [PipelineStep.PARSE_RESUME]
    assert len(controller.snapshots) == 1

    controller.rollback_to_previous_step()
    assert controller.rollback_to_previous_step() is None


def test_progress_percentage(controller, resume_data):
    seen = []
    controller.on_progress_change(lambda progress: seen.append(progress.percentage_complete))
    _run_to(controller, resume_data, 2)
    # Two completed steps plus half of the current one
    assert controller.get_state().progress_percentage == 35
    assert seen == sorted(seen)
    assert controller.get_progress().step_name == 'Complete Missing Sections'


def test_step_errors_are_logged(config):
    controller = PipelineController(DEVOPS_JD, config=dataclasses.replace(config, error_log_limit=3))
    result = controller.execute_step(2)
    assert not result.success
    assert 'parse step' in result.error
    assert controller.get_state().failed_steps == [PipelineStep.ANALYZE_AGAINST_JD]
    assert controller.step_history[-1].status == StepStatus.FAILED

    for _ in range(4):
        controller.execute_step(2)
    assert len(controller.error_log) == 3
    assert controller.error_log[-1].retry_attempt == 4


def test_retry_limit(controller):
    for _ in range(3):
        assert not controller.execute_step(2).success
    result = controller.retry_step(2)
    assert not result.success
    assert result.error.startswith('Max retries exceeded for step 2')


def test_retry_recovers(controller, resume_data):
    controller.execute_step(2)
    controller.execute_step(1, {'resume': resume_data})
    result = controller.retry_step(2)
    assert result.success
    assert controller.get_state().failed_steps == []


def test_skip_rules(controller, resume_data):
    assert controller.skip_step(2).error == 'Step 2 cannot be skipped'

    _run_to(controller, resume_data, 3)
    skipped = controller.skip_step(4)
    assert skipped.success
    assert skipped.next_step == PipelineStep.RE_ANALYSIS
    assert controller.current_step == PipelineStep.RE_ANALYSIS
    assert controller.step_history[-1].status == StepStatus.SKIPPED


def test_failing_listener_is_tolerated(controller, resume_data):
    controller.on_state_change(lambda state: 1 / 0)
    controller.on_progress_change(lambda progress: 1 / 0)
    assert controller.execute_step(1, {'resume': resume_data}).success


def test_unknown_step(controller):
    result = controller.execute_step(9)
    assert not result.success
    assert result.error == 'Unknown pipeline step: 9'


def test_state_serializes(controller, resume_data):
    _run_to(controller, resume_data, 1)
    state = controller.get_state().to_dict()
    assert state['session_id'] == 'test-session'
    assert state['completed_steps'] == [1]
    assert state['current_step'] == 2
    assert controller.snapshots.get(1).to_dict()['step_name'] == 'Parse Resume'
