import json
from pathlib import Path
from uuid import uuid4

from fastapi.testclient import TestClient

from app.core.config import settings
from app.db.init_db import init_db
from app.main import app


def _auth_headers(client: TestClient, name: str = 'Reporter') -> dict:
    email = f"{uuid4()}@b.com"
    client.post('/api/v1/auth/register', json={'email': email, 'password': 'secret123', 'name': name})
    login = client.post('/api/v1/auth/login', json={'email': email, 'password': 'secret123'})
    return {'Authorization': f"Bearer {login.json()['access_token']}"}


def _form(**overrides) -> dict:
    data = {
        'category': 'fraud',
        'title': 'Fake invoice',
        'description': 'Invoice for a domain renewal that was never ordered.',
        'location': 'Berlin',
    }
    data.update(overrides)
    return data


def test_anonymous_submission_then_lookup_finds_it():
    init_db(drop_all=True)
    with TestClient(app) as client:
        entities = json.dumps([{'entity_type': 'email', 'value': ' scam@example.com '}])
        created = client.post('/api/v1/reports', data=_form(anonymous='true', entities=entities))
        assert created.status_code == 201
        body = created.json()
        assert body['is_anonymous'] is True
        assert body['status'] == 'pending'
        assert body['reference_id'].startswith('FR-')
        assert body['warnings'] == []

        lookup = client.get('/api/v1/lookup', params={'entity_type': 'email', 'q': 'scam@'})
        assert lookup.status_code == 200
        results = lookup.json()
        assert len(results) == 1
        assert results[0]['entity_value'] == 'scam@example.com'
        assert results[0]['report']['reference_id'] == body['reference_id']
        assert results[0]['report']['title'] == 'Fake invoice'

        other_type = client.get('/api/v1/lookup', params={'entity_type': 'phone', 'q': 'scam@'})
        assert other_type.json() == []


def test_submission_requires_sign_in_or_anonymous():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.post('/api/v1/reports', data=_form())
        assert response.status_code == 401
        assert response.json()['detail'] == 'Please sign in or choose anonymous reporting'
        assert client.get('/api/v1/reports').json() == []


def test_submission_reports_all_missing_fields():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.post(
            '/api/v1/reports',
            data=_form(title='', description='  ', anonymous='true'),
        )
        assert response.status_code == 400
        assert response.json()['detail'] == 'Missing required fields: title, description'


def test_submission_rejects_invalid_entities_payload():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.post('/api/v1/reports', data=_form(anonymous='true', entities='not json'))
        assert response.status_code == 422


def test_oversize_evidence_is_rejected():
    init_db(drop_all=True)
    with TestClient(app) as client:
        payload = b'0' * (settings.EVIDENCE_MAX_BYTES + 1)
        response = client.post(
            '/api/v1/reports',
            data=_form(anonymous='true'),
            files={'evidence': ('huge.png', payload, 'image/png')},
        )
        assert response.status_code == 413
        assert response.json()['detail'] == 'File size must be less than 10MB'
        assert client.get('/api/v1/reports').json() == []


def test_evidence_is_stored_and_served():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.post(
            '/api/v1/reports',
            data=_form(category='deepfake', anonymous='true'),
            files={'evidence': ('Clip.MP4', b'\x00\x01video', 'video/mp4')},
        )
        assert response.status_code == 201
        body = response.json()
        assert body['reference_id'].startswith('DF-')
        assert body['evidence_url'] == f"{settings.EVIDENCE_PUBLIC_URL}/evidence/{body['id']}.mp4"

        stored = Path(settings.EVIDENCE_DIR) / 'evidence' / f"{body['id']}.mp4"
        assert stored.read_bytes() == b'\x00\x01video'
        served = client.get(body['evidence_url'])
        assert served.status_code == 200
        assert served.content == b'\x00\x01video'


def test_list_reports_filters_by_category_newest_first():
    init_db(drop_all=True)
    with TestClient(app) as client:
        client.post('/api/v1/reports', data=_form(title='First fraud', anonymous='true'))
        client.post('/api/v1/reports', data=_form(category='phishing', title='Phish', anonymous='true'))
        client.post('/api/v1/reports', data=_form(title='Second fraud', anonymous='true'))

        all_reports = client.get('/api/v1/reports').json()
        assert [item['title'] for item in all_reports] == ['Second fraud', 'Phish', 'First fraud']

        fraud = client.get('/api/v1/reports', params={'category': 'fraud'}).json()
        assert [item['title'] for item in fraud] == ['Second fraud', 'First fraud']


def test_get_report_by_reference_is_case_insensitive():
    init_db(drop_all=True)
    with TestClient(app) as client:
        created = client.post('/api/v1/reports', data=_form(anonymous='true')).json()
        found = client.get(f"/api/v1/reports/ref/{created['reference_id'].lower()}")
        assert found.status_code == 200
        assert found.json()['id'] == created['id']
        assert client.get('/api/v1/reports/ref/FR-2020-ZZZZZZZZ').status_code == 404
        assert client.get('/api/v1/reports/ref/garbage').status_code == 404


def test_owner_can_update_replace_entities_and_delete():
    init_db(drop_all=True)
    with TestClient(app) as client:
        headers = _auth_headers(client)
        entities = json.dumps([{'entity_type': 'phone', 'value': '+1 555 0100'}])
        created = client.post('/api/v1/reports', data=_form(entities=entities), headers=headers)
        assert created.status_code == 201
        report = created.json()
        assert report['is_anonymous'] is False

        mine = client.get('/api/v1/me/reports', headers=headers).json()
        assert [item['id'] for item in mine] == [report['id']]

        updated = client.patch(
            f"/api/v1/reports/{report['id']}",
            json={'title': 'Fake invoice (updated)', 'status': 'investigating'},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()['title'] == 'Fake invoice (updated)'
        assert updated.json()['status'] == 'investigating'

        replaced = client.put(
            f"/api/v1/reports/{report['id']}/entities",
            json={'entities': [{'entity_type': 'website', 'value': 'pay-now.example'}, {'entity_type': 'email', 'value': ' '}]},
            headers=headers,
        )
        assert replaced.status_code == 200
        assert [(item['entity_type'], item['entity_value']) for item in replaced.json()] == [
            ('website', 'pay-now.example')
        ]
        listed = client.get(f"/api/v1/reports/{report['id']}/entities").json()
        assert [item['entity_value'] for item in listed] == ['pay-now.example']
        assert client.get('/api/v1/lookup', params={'entity_type': 'phone', 'q': '555'}).json() == []

        deleted = client.delete(f"/api/v1/reports/{report['id']}", headers=headers)
        assert deleted.status_code == 200
        assert client.get(f"/api/v1/reports/{report['id']}/entities").status_code == 404
        assert client.get('/api/v1/lookup', params={'entity_type': 'website', 'q': 'pay-now'}).json() == []


def test_owner_edit_rejects_blank_required_fields():
    init_db(drop_all=True)
    with TestClient(app) as client:
        headers = _auth_headers(client)
        report = client.post('/api/v1/reports', data=_form(), headers=headers).json()

        response = client.patch(
            f"/api/v1/reports/{report['id']}",
            json={'title': '   ', 'description': ' '},
            headers=headers,
        )
        assert response.status_code == 422
        stored = client.get(f"/api/v1/reports/ref/{report['reference_id']}").json()
        assert stored['title'] == 'Fake invoice'
        assert stored['description'] == report['description']

        trimmed = client.patch(f"/api/v1/reports/{report['id']}", json={'title': '  Fake invoice v2  '}, headers=headers)
        assert trimmed.status_code == 200
        assert trimmed.json()['title'] == 'Fake invoice v2'


def test_deleting_report_removes_evidence_file():
    init_db(drop_all=True)
    with TestClient(app) as client:
        headers = _auth_headers(client)
        report = client.post(
            '/api/v1/reports',
            data=_form(),
            files={'evidence': ('receipt.png', b'png-bytes', 'image/png')},
            headers=headers,
        ).json()
        stored = Path(settings.EVIDENCE_DIR) / 'evidence' / f"{report['id']}.png"
        assert stored.exists()

        assert client.delete(f"/api/v1/reports/{report['id']}", headers=headers).status_code == 200
        assert not stored.exists()
        assert client.get(report['evidence_url']).status_code == 404


def test_other_users_cannot_modify_reports():
    init_db(drop_all=True)
    with TestClient(app) as client:
        owner = _auth_headers(client, 'Owner')
        stranger = _auth_headers(client, 'Stranger')
        report = client.post('/api/v1/reports', data=_form(), headers=owner).json()

        assert client.patch(f"/api/v1/reports/{report['id']}", json={'title': 'x'}, headers=stranger).status_code == 403
        assert client.delete(f"/api/v1/reports/{report['id']}", headers=stranger).status_code == 403
        assert client.patch(f"/api/v1/reports/{report['id']}", json={'title': 'x'}).status_code in (401, 403)
        assert client.patch(f"/api/v1/reports/{uuid4()}", json={'title': 'x'}, headers=owner).status_code == 404


def test_anonymous_reports_cannot_be_modified_by_anyone():
    init_db(drop_all=True)
    with TestClient(app) as client:
        headers = _auth_headers(client)
        report = client.post('/api/v1/reports', data=_form(anonymous='true')).json()
        response = client.delete(f"/api/v1/reports/{report['id']}", headers=headers)
        assert response.status_code == 403


def test_invalid_token_is_rejected_even_when_anonymous():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.post(
            '/api/v1/reports',
            data=_form(anonymous='true'),
            headers={'Authorization': 'Bearer not-a-token'},
        )
        assert response.status_code == 401


def test_health_reports_database_status():
    init_db(drop_all=True)
    with TestClient(app) as client:
        response = client.get('/api/v1/health')
        assert response.status_code == 200
        assert response.json()['database'] == 'ok'
