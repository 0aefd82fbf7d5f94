# tests/test_ai.py
from unittest.mock import MagicMock

import pytest
import requests

from resume_optimizer.ai.client import GenerativeClient, parse_json_response
from resume_optimizer.ai.rewriter import BulletRewriter, merge_bullets
from resume_optimizer.errors import ExternalServiceError


def _response(content):
    response = MagicMock()
    response.json.return_value = {'message': {'content': content}}
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(config, session):
    return GenerativeClient(config.llm, session=session)


def test_generate_returns_message_content(client, session):
    session.post.return_value = _response('  Built things.  ')
    assert client.generate('Rewrite this', system_prompt='Be brief') == 'Built things.'

    payload = session.post.call_args.kwargs['json']
    assert payload['stream'] is False
    assert [m['role'] for m in payload['messages']] == ['system', 'user']
    assert session.post.call_args.args[0].endswith('/api/chat')


def test_connection_errors_exhaust_retries(client, session):
    session.post.side_effect = requests.ConnectionError('refused')
    with pytest.raises(ExternalServiceError) as excinfo:
        client.generate('hello')
    assert session.post.call_count == 2
    assert isinstance(excinfo.value.cause, requests.ConnectionError)


def test_timeout_is_retried(client, session):
    session.post.side_effect = [requests.Timeout('slow'), _response('ok')]
    assert client.generate('hello') == 'ok'
    assert session.post.call_count == 2


def test_empty_content_is_an_error(client, session):
    session.post.return_value = _response('   ')
    with pytest.raises(ExternalServiceError):
        client.generate('hello')


@pytest.mark.parametrize('body', [
    [],
    {'message': 'oops'},
    {'content': None},
    {'message': {'content': None}},
])
def test_malformed_body_is_an_error(client, session, body):
    session.post.return_value.json.return_value = body
    with pytest.raises(ExternalServiceError):
        client.generate('hello')


def test_generate_json(client, session):
    session.post.return_value = _response('```json\n["a", "b"]\n```')
    assert client.generate_json('list please') == ['a', 'b']


def test_is_available(client, session):
    session.get.return_value.status_code = 200
    assert client.is_available()
    session.get.side_effect = requests.ConnectionError('down')
    assert not client.is_available()


@pytest.mark.parametrize('text,expected', [
    ('["one", "two"]', ['one', 'two']),
    ('```json\n{"suitable": true}\n```', {'suitable': True}),
    ('Here you go:\n["x", "y"]\nHope that helps!', ['x', 'y']),
])
def test_parse_json_response(text, expected):
    assert parse_json_response(text) == expected


def test_parse_json_response_without_json():
    with pytest.raises(ExternalServiceError):
        parse_json_response('I cannot help with that.')


def test_merge_keeps_originals_for_bad_candidates():
    merged, rewritten = merge_bullets(['a', 'b', 'c'], ['A new', '', 'word ' * 60])
    assert merged == ['A new', 'b', 'c']
    assert rewritten == [0]


def test_merge_with_short_candidate_list():
    merged, rewritten = merge_bullets(['a', 'b'], ['A new'])
    assert merged == ['A new', 'b']
    assert rewritten == [0]


def test_rewriter_merges_provider_output():
    fake = MagicMock()
    fake.generate_json.return_value = ['Engineered the API, serving 10K+ users', 'same']
    batch = BulletRewriter(fake).rewrite(['Made the API', 'same'], 'Backend Engineer', ['Python'])
    assert batch.bullets == ['Engineered the API, serving 10K+ users', 'same']
    assert batch.rewritten_indices == [0]
    assert not batch.fallback


def test_rewriter_falls_back_on_provider_failure():
    fake = MagicMock()
    fake.generate_json.side_effect = ExternalServiceError('down')
    batch = BulletRewriter(fake).rewrite(['Made the API'], 'Backend Engineer', ['Python'])
    assert batch.bullets == ['Made the API']
    assert batch.fallback
    assert batch.error == 'down'


def test_rewriter_falls_back_on_non_list_payload():
    fake = MagicMock()
    fake.generate_json.return_value = {'bullets': ['x']}
    batch = BulletRewriter(fake).rewrite(['Made the API'], 'Backend Engineer', [], style='projects')
    assert batch.bullets == ['Made the API']
    assert batch.fallback


def test_rewriter_falls_back_on_malformed_provider_body(client, session):
    session.post.return_value.json.return_value = []
    batch = BulletRewriter(client).rewrite(['Made the API'], 'Backend Engineer', ['Python'])
    assert batch.bullets == ['Made the API']
    assert batch.fallback
    assert batch.rewritten_indices == []


def test_rewriter_skips_empty_input():
    fake = MagicMock()
    batch = BulletRewriter(fake).rewrite([], 'Backend Engineer', [])
    assert batch.bullets == []
    fake.generate_json.assert_not_called()
