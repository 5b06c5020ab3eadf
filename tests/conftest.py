from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from werkzeug.exceptions import NotFound

from Staffluent.app import create_app
from Staffluent.chatbot_agent.Business_Chatbot import BusinessChatbotService
from Staffluent.chatbot_agent.cleanup_guard import CleanupGuard, default_cleanup_guard

API_KEY = 'secret-key'


def _matches(doc, filter):
    for key, expected in filter.items():
        actual = doc.get(key)
        if key == '_id':
            if str(actual) != str(expected):
                return False
        elif actual != expected:
            return False
    return True


class FakeMessageStore:
    def __init__(self):
        self.messages = []
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def create(self, turn):
        # Strictly increasing timestamps keep ordering stable
        self._clock += timedelta(seconds=1)
        doc = dict(turn, _id=ObjectId(), createdAt=self._clock, updatedAt=self._clock)
        doc.setdefault('suggestions', [])
        doc.setdefault('metadata', {})
        self.messages.append(doc)
        return doc

    def find(self, filter, sort=1, limit=0, skip=0):
        found = sorted((m for m in self.messages if _matches(m, filter)),
                       key=lambda m: m['createdAt'], reverse=sort == -1)
        found = found[skip:]
        return found[:limit] if limit else found

    def find_one(self, filter):
        return next((m for m in self.messages if _matches(m, filter)), None)

    def count_documents(self, filter):
        return len([m for m in self.messages if _matches(m, filter)])

    def delete_many(self, filter):
        before = len(self.messages)
        self.messages = [m for m in self.messages if not _matches(m, filter)]
        return before - len(self.messages)

    def update_metadata(self, message_id, metadata):
        message = self.find_one({'_id': message_id})
        if message is None:
            return False
        message['metadata'] = metadata
        return True

    def aggregate_sessions(self, business_id, client_id, skip=0, limit=20):
        sessions = {}
        for message in self.find({'businessId': business_id, 'clientId': client_id}, sort=-1):
            summary = sessions.setdefault(message['sessionId'], {
                '_id': message['sessionId'],
                'lastMessage': message['content'],
                'lastMessageTime': message['createdAt'],
                'userId': message.get('userId'),
                'messageCount': 0
            })
            summary['messageCount'] += 1
        return list(sessions.values())[skip:skip + limit]

    def count_sessions(self, business_id, client_id):
        return len({m['sessionId'] for m in self.find({'businessId': business_id, 'clientId': client_id})})


class FakeKnowledgeBase:
    def __init__(self):
        self.documents = []
        self.pairs = []
        self.unrecognized = []
        self.calls = []
        self.cleanup_calls = 0
        self.success_updates = []
        self.used_pairs = []
        self.index_calls = 0

    def ensure_indexes(self):
        self.index_calls += 1

    def search_documents(self, query, client_id=None, business_type='default', features=None,
                         current_view=None, limit=5):
        self.calls.append(('search_documents', query, limit))
        return [d for d in self.documents if any(k in query for k in d.get('keywords', []))][:limit]

    def search_query_responses(self, query, category=None, limit=3, client_id=None):
        self.calls.append(('search_query_responses', query, category))
        return [p for p in self.pairs if p.get('active', True) and p.get('category') == category][:limit]

    def log_unrecognized_query(self, message, client_id=None, business_type=None, user_id=None,
                               session_id=None, context=None):
        self.calls.append(('log_unrecognized_query', message))
        for query in self.unrecognized:
            if query['message'].lower() == message.lower():
                query['frequency'] += 1
                return query
        query = {'_id': ObjectId(), 'message': message, 'clientId': client_id, 'sessionId': session_id,
                 'context': context or {}, 'status': 'pending', 'frequency': 1}
        self.unrecognized.append(query)
        return query

    def record_pair_use(self, pair_id):
        self.used_pairs.append(str(pair_id))
        return True

    def update_response_success(self, pair_id, was_helpful, client_id=None):
        pair = next((p for p in self.pairs if str(p['_id']) == str(pair_id)), None)
        if pair is None:
            raise NotFound(f"Query-response pair with ID {pair_id} not found")
        self.success_updates.append((str(pair_id), was_helpful))
        return pair

    def cleanup_bad_responses(self, patterns):
        self.cleanup_calls += 1
        before = len(self.pairs)
        self.pairs = [p for p in self.pairs if not any(pattern.search(p['response']) for pattern in patterns)]
        return before - len(self.pairs)

    def get_pending_queries(self, client_id=None, limit=20, page=1):
        pending = [q for q in self.unrecognized if q['status'] == 'pending']
        return {'queries': pending[(page - 1) * limit:page * limit], 'total': len(pending),
                'page': page, 'limit': limit}

    def respond_to_unrecognized_query(self, query_id, response, client_id=None):
        query = next((q for q in self.unrecognized if str(q['_id']) == str(query_id)), None)
        if query is None:
            raise NotFound(f"Unrecognized query with ID {query_id} not found")
        self.pairs.append({'_id': ObjectId(), 'query': query['message'], 'response': response,
                           'category': 'general', 'clientId': client_id, 'active': True})
        query.update(status='answered', resolved=True, response=response)
        return query

    def create_document(self, title, content, client_id, keywords=None, categories=None, type='article'):
        document = {'_id': ObjectId(), 'title': title, 'content': content, 'clientId': client_id,
                    'keywords': keywords or [], 'categories': categories or [], 'type': type, 'active': True}
        self.documents.append(document)
        return document


class FakeDirectory:
    def __init__(self):
        self.businesses = {}
        self.users = {}
        self.failing_user_ids = set()

    def find_business_by_id(self, business_id):
        return self.businesses.get(str(business_id))

    def find_business_by_id_and_api_key(self, business_id, api_key):
        business = self.businesses.get(str(business_id))
        if business and business.get('apiKey') == api_key:
            return business
        return None

    def find_user_by_id(self, user_id):
        if str(user_id) in self.failing_user_ids:
            raise RuntimeError('user lookup timed out')
        return self.users.get(str(user_id))


@pytest.fixture(autouse=True)
def reset_default_cleanup_guard():
    default_cleanup_guard.reset()
    yield
    default_cleanup_guard.reset()


@pytest.fixture
def business():
    business_id = ObjectId()
    return {
        '_id': business_id,
        'name': 'Acme Builders',
        'clientId': 'client-1',
        'operationType': 'construction',
        'includedFeatures': ['chat', 'projects'],
        'apiKey': API_KEY
    }


@pytest.fixture
def user():
    return {'_id': ObjectId(), 'name': 'Dana', 'email': 'dana@example.com'}


@pytest.fixture
def message_store():
    return FakeMessageStore()


@pytest.fixture
def knowledge_base():
    return FakeKnowledgeBase()


@pytest.fixture
def directory(business, user):
    directory = FakeDirectory()
    directory.businesses[str(business['_id'])] = business
    directory.users[str(user['_id'])] = user
    return directory


@pytest.fixture
def cleanup_guard():
    return CleanupGuard()


@pytest.fixture
def service(message_store, knowledge_base, directory, cleanup_guard):
    return BusinessChatbotService(message_store, knowledge_base, directory, cleanup_guard=cleanup_guard)


@pytest.fixture
def app(service):
    return create_app({'TESTING': True, 'CHATBOT_SERVICE': service, 'LOG_LEVEL': 'WARNING'})


@pytest.fixture
def client(app):
    return app.test_client()
