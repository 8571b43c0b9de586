import json

from conftest import make_quiz_payload


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'NanoQuiz' in res.get_json()['message']


def test_health_reports_live_sessions(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok', 'sessions': 0}


def test_validate_accepts_good_quiz(client):
    res = client.post('/api/quizzes/validate', json=make_quiz_payload(num_questions=3))
    assert res.status_code == 200
    assert res.get_json() == {'ok': True, 'title': 'Capitals', 'questionCount': 3}


def test_validate_reports_offending_field(client):
    payload = make_quiz_payload()
    payload['questions'][1]['options'] = [{'id': 'a', 'label': 'Only'}]
    res = client.post('/api/quizzes/validate', json=payload)
    assert res.status_code == 400
    data = res.get_json()
    assert data['ok'] is False
    assert data['error'].startswith('questions[1].options')


def test_validate_rejects_non_json_body(client):
    res = client.post('/api/quizzes/validate', data='not json', content_type='text/plain')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'quiz must be an object'


def test_validate_quiz_cli(flask_app, tmp_path):
    runner = flask_app.test_cli_runner()
    good = tmp_path / 'good.json'
    good.write_text(json.dumps(make_quiz_payload()), encoding='utf-8')
    result = runner.invoke(args=['validate-quiz', str(good)])
    assert result.exit_code == 0
    assert 'Capitals' in result.output

    bad = tmp_path / 'bad.json'
    bad.write_text(json.dumps({'title': '', 'questions': make_quiz_payload()['questions']}), encoding='utf-8')
    result = runner.invoke(args=['validate-quiz', str(bad)])
    assert result.exit_code == 1
    assert 'title' in result.output

    broken = tmp_path / 'broken.json'
    broken.write_text('{', encoding='utf-8')
    result = runner.invoke(args=['validate-quiz', str(broken)])
    assert result.exit_code == 1
    assert 'Not valid JSON' in result.output
