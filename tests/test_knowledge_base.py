from unittest import mock

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure
from werkzeug.exceptions import NotFound

from Staffluent.chatbot_agent.history_manager import MessageStore, to_object_id
from Staffluent.chatbot_agent.knowledge_base import KnowledgeBase, extract_keywords
from Staffluent.chatbot_agent.response_validator import OFF_TOPIC_PATTERNS


@pytest.fixture
def db():
    return mock.MagicMock()


@pytest.fixture
def kb(db):
    return KnowledgeBase(db)


def test_extract_keywords():
    assert extract_keywords('How do I export the weekly timesheets?') == ['how', 'export', 'weekly', 'timesheets']


def test_to_object_id():
    oid = ObjectId()
    assert to_object_id(oid) is oid
    assert to_object_id(str(oid)) == oid
    assert to_object_id('not-an-id') is None
    assert to_object_id(None) is None


def test_combine_and_rank_merges_strategies():
    doc_id = ObjectId()
    other_id = ObjectId()
    ranked = KnowledgeBase._combine_and_rank(
        [{'_id': doc_id, 'searchScore': 10, 'searchMethod': 'keywords'}],
        [{'_id': doc_id, 'searchScore': 2, 'searchMethod': 'fulltext'},
         {'_id': other_id, 'searchScore': 4, 'searchMethod': 'fulltext'}],
        [{'_id': other_id, 'searchScore': 5, 'searchMethod': 'category'}],
    )

    assert [d['_id'] for d in ranked] == [doc_id, other_id]
    assert ranked[0]['searchScore'] == pytest.approx(10 * 1.5 + 2 * 0.8)
    assert ranked[0]['searchMethod'] == 'keywords, fulltext'
    assert ranked[1]['searchScore'] == pytest.approx(4 + 5 * 0.3)


def test_filter_by_business_context():
    docs = [
        {'_id': 1, 'applicableBusinessTypes': ['hospitality']},
        {'_id': 2, 'applicableBusinessTypes': ['construction']},
        {'_id': 3, 'applicableBusinessTypes': ['all'], 'applicableFeatures': ['equipment']},
        {'_id': 4},
    ]

    kept = KnowledgeBase._filter_by_business_context(docs, 'construction', ['chat'])

    assert [d['_id'] for d in kept] == [2, 4]


def test_search_documents_blank_query(kb, db):
    assert kb.search_documents('   ') == []
    db.Knowledge_Documents.find.assert_not_called()


def test_full_text_failure_falls_back_to_regex(kb, db):
    doc = {'_id': ObjectId(), 'title': 'Team chat', 'content': 'Use team chat to reach your crew.',
           'keywords': []}
    fulltext_cursor = mock.MagicMock()
    fulltext_cursor.sort.side_effect = OperationFailure('text index required')
    regex_cursor = mock.MagicMock()
    regex_cursor.limit.return_value = [doc]
    db.Knowledge_Documents.find.side_effect = [fulltext_cursor, regex_cursor]

    results = kb._search_by_full_text('team chat', {'active': True}, 5)

    assert results[0]['searchMethod'] == 'regex'
    assert results[0]['searchScore'] == 10 + 2


def test_update_response_success(kb, db):
    pair_id = ObjectId()
    db.Query_Response_Pairs.find_one.return_value = {'_id': pair_id, 'useCount': 4, 'successRate': 50}

    kb.update_response_success(str(pair_id), True)

    update = db.Query_Response_Pairs.find_one_and_update.call_args[0][1]
    assert update['$set']['successRate'] == pytest.approx(3 / 5 * 100)


def test_update_response_success_unknown_pair(kb, db):
    db.Query_Response_Pairs.find_one.return_value = None

    with pytest.raises(NotFound):
        kb.update_response_success(str(ObjectId()), True)
    with pytest.raises(NotFound):
        kb.update_response_success('not-an-id', True)


def test_log_unrecognized_query_increments_existing(kb, db):
    existing = {'_id': ObjectId(), 'message': 'Sports', 'frequency': 2, 'context': {}}
    db.Unrecognized_Queries.find_one.return_value = existing

    kb.log_unrecognized_query('sports', client_id='client-1')

    update = db.Unrecognized_Queries.find_one_and_update.call_args[0][1]
    assert update['$inc'] == {'frequency': 1}
    db.Unrecognized_Queries.insert_one.assert_not_called()


def test_log_unrecognized_query_creates_pending(kb, db):
    db.Unrecognized_Queries.find_one.return_value = None

    query = kb.log_unrecognized_query('where is the bus?', client_id='client-1', session_id='s1')

    assert query['status'] == 'pending'
    assert query['frequency'] == 1
    assert db.Unrecognized_Queries.find_one.call_args[0][0]['message']['$regex'] == r'^where\ is\ the\ bus\?$'


def test_cleanup_bad_responses_counts_deletions(kb, db):
    db.Query_Response_Pairs.delete_many.return_value.deleted_count = 1

    assert kb.cleanup_bad_responses(OFF_TOPIC_PATTERNS) == len(OFF_TOPIC_PATTERNS)


def test_respond_to_unrecognized_query_creates_pair(kb, db):
    query_id = ObjectId()
    db.Unrecognized_Queries.find_one.return_value = {'_id': query_id, 'message': 'how do I add a shift',
                                                     'context': {'currentView': 'time'}}

    kb.respond_to_unrecognized_query(str(query_id), 'Open Schedules and click Add Shift.', client_id='client-1')

    pair = db.Query_Response_Pairs.insert_one.call_args[0][0]
    assert pair['query'] == 'how do I add a shift'
    assert pair['category'] == 'time'
    assert pair['clientId'] == 'client-1'
    update = db.Unrecognized_Queries.find_one_and_update.call_args[0][1]
    assert update['$set']['status'] == 'answered'


def test_message_store_update_metadata(db):
    store = MessageStore(db)
    db.Chatbot_Messages.update_one.return_value.matched_count = 1
    message_id = ObjectId()

    assert store.update_metadata(str(message_id), {'feedback': {'wasHelpful': True}}) is True
    assert db.Chatbot_Messages.update_one.call_args[0][0] == {'_id': message_id}


def test_message_store_find_one_with_bad_id(db):
    assert MessageStore(db).find_one({'_id': 'bad-id'}) is None
    db.Chatbot_Messages.find_one.assert_not_called()


def test_search_query_responses_without_text_index(kb, db):
    db.Query_Response_Pairs.find.side_effect = OperationFailure('text index required for $text query')

    assert kb.search_query_responses('tell me about projects', category='general') == []


def test_search_query_responses_does_not_count_uses(kb, db):
    cursor = db.Query_Response_Pairs.find.return_value
    cursor.sort.return_value.limit.return_value = [{'_id': ObjectId(), 'query': 'q'}, {'_id': ObjectId(), 'query': 'r'}]

    assert len(kb.search_query_responses('export timesheets')) == 2
    db.Query_Response_Pairs.update_one.assert_not_called()
    db.Query_Response_Pairs.update_many.assert_not_called()


def test_record_pair_use(kb, db):
    pair_id = ObjectId()
    db.Query_Response_Pairs.update_one.return_value.matched_count = 1

    assert kb.record_pair_use(str(pair_id)) is True
    db.Query_Response_Pairs.update_one.assert_called_once_with({'_id': pair_id}, {'$inc': {'useCount': 1}})
    assert kb.record_pair_use('not-an-id') is False


def test_ensure_indexes_covers_learned_pair_search(kb, db):
    kb.ensure_indexes()

    indexes = [call[0][0] for call in db.Query_Response_Pairs.create_index.call_args_list]
    assert [('query', 'text'), ('keywords', 'text')] in indexes
    assert [('keywords', 1)] in indexes
