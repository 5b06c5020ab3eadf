import pytest
from bson import ObjectId


HEADERS = {'business-x-api-key': 'secret-key'}


@pytest.fixture
def base_url(business):
    return f"/business-chatbot/{business['_id']}"


def test_missing_api_key_is_unauthorized(client, base_url):
    response = client.post(f'{base_url}/message', json={'message': 'hello'})

    assert response.status_code == 401
    assert response.get_json()['status'] == 'error'


def test_wrong_api_key_is_unauthorized(client, base_url):
    response = client.get(f'{base_url}/history', headers={'business-x-api-key': 'nope'})

    assert response.status_code == 401


def test_blank_message_is_bad_request(client, base_url):
    response = client.post(f'{base_url}/message', json={'message': '   '}, headers=HEADERS)

    assert response.status_code == 400
    assert response.get_json() == {'status': 'error', 'message': 'Message is required'}


def test_non_json_body_is_bad_request(client, base_url):
    response = client.post(f'{base_url}/message', data='hello', headers=HEADERS)

    assert response.status_code == 400


def test_message_and_history_round_trip(client, base_url, user):
    sent = client.post(f'{base_url}/message', json={'message': 'hello', 'userId': str(user['_id'])},
                       headers=HEADERS).get_json()

    assert sent['success'] is True
    assert sent['responseSource'] == 'conversation'

    history = client.get(f"{base_url}/history?sessionId={sent['sessionId']}", headers=HEADERS).get_json()

    assert history['total'] == 2
    assert [m['sender'] for m in history['messages']] == ['user', 'bot']


def test_invalid_pagination(client, base_url):
    response = client.get(f'{base_url}/history?limit=abc', headers=HEADERS)

    assert response.status_code == 400


def test_clear_history_requires_session(client, base_url):
    response = client.delete(f'{base_url}/history', headers=HEADERS)

    assert response.get_json() == {'success': False, 'deletedCount': 0}


def test_clear_history(client, base_url):
    sent = client.post(f'{base_url}/message', json={'message': 'hello'}, headers=HEADERS).get_json()

    response = client.delete(f"{base_url}/history?sessionId={sent['sessionId']}", headers=HEADERS)

    assert response.get_json() == {'success': True, 'deletedCount': 2}


def test_sessions(client, base_url, user):
    client.post(f'{base_url}/message', json={'message': 'hello', 'userId': str(user['_id'])}, headers=HEADERS)

    body = client.get(f'{base_url}/sessions', headers=HEADERS).get_json()

    assert body['total'] == 1
    assert body['sessions'][0]['messageCount'] == 2
    assert body['sessions'][0]['user']['name'] == 'Dana'


def test_feedback(client, base_url):
    sent = client.post(f'{base_url}/message', json={'message': 'how do I create a task'},
                       headers=HEADERS).get_json()

    response = client.post(f'{base_url}/feedback', json={'messageId': sent['messageId'], 'wasHelpful': True},
                           headers=HEADERS)

    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'sourceUpdated': False}


def test_feedback_unknown_message(client, base_url):
    response = client.post(f'{base_url}/feedback', json={'messageId': str(ObjectId()), 'wasHelpful': False},
                           headers=HEADERS)

    assert response.status_code == 200
    assert response.get_json()['success'] is False


def test_feedback_requires_boolean(client, base_url):
    response = client.post(f'{base_url}/feedback', json={'messageId': str(ObjectId()), 'wasHelpful': 'yes'},
                           headers=HEADERS)

    assert response.status_code == 400


def test_unrecognized_query_answered_becomes_learned_pair(client, business, knowledge_base):
    kb_url = f"/knowledge-base/{business['_id']}"
    client.post(f"/business-chatbot/{business['_id']}/message", json={'message': 'sports'}, headers=HEADERS)

    pending = client.get(f'{kb_url}/unrecognized', headers=HEADERS).get_json()
    assert pending['total'] == 1
    query_id = pending['queries'][0]['id']

    answered = client.post(f'{kb_url}/unrecognized/{query_id}/respond',
                           json={'response': 'Staffluent focuses on workforce management.'}, headers=HEADERS)

    assert answered.status_code == 200
    assert answered.get_json()['query']['status'] == 'answered'
    assert knowledge_base.pairs[-1]['query'] == 'sports'


def test_respond_to_unknown_query_is_not_found(client, business):
    response = client.post(f"/knowledge-base/{business['_id']}/unrecognized/{ObjectId()}/respond",
                           json={'response': 'text'}, headers=HEADERS)

    assert response.status_code == 404
    assert response.get_json()['status'] == 'error'


def test_create_document(client, business, knowledge_base):
    response = client.post(f"/knowledge-base/{business['_id']}/documents",
                           json={'title': 'Shifts', 'content': 'Create shifts from the schedule view.',
                                 'type': 'guide'},
                           headers=HEADERS)

    assert response.status_code == 201
    assert response.get_json()['document']['title'] == 'Shifts'
    assert knowledge_base.documents[0]['clientId'] == 'client-1'


def test_create_document_rejects_unknown_type(client, business):
    response = client.post(f"/knowledge-base/{business['_id']}/documents",
                           json={'title': 'Shifts', 'content': 'text', 'type': 'video'}, headers=HEADERS)

    assert response.status_code == 400
