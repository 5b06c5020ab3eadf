from flask import Blueprint, g, jsonify
from werkzeug.exceptions import BadRequest

from Staffluent.app.services import get_chatbot_service
from Staffluent.app.utils import api_key_required, get_json_body, get_pagination

knowledge_bp = Blueprint('knowledge_base', __name__, url_prefix='/knowledge-base')

DOCUMENT_TYPES = {'article', 'faq', 'guide', 'announcement'}


def _serialize(record):
    serialized = dict(record)
    serialized['id'] = str(serialized.pop('_id'))
    return serialized


@knowledge_bp.route('/<business_id>/unrecognized', methods=['GET'])
@api_key_required
def list_unrecognized(business_id):
    """Questions the chatbot could not answer, most frequent first."""
    limit, page = get_pagination()
    result = get_chatbot_service().knowledge_base.get_pending_queries(g.client_id, limit=limit, page=page)
    result['queries'] = [_serialize(q) for q in result['queries']]
    result['success'] = True
    return jsonify(result)


@knowledge_bp.route('/<business_id>/unrecognized/<query_id>/respond', methods=['POST'])
@api_key_required
def respond_to_unrecognized(business_id, query_id):
    data = get_json_body()
    response = data.get('response')
    if not isinstance(response, str) or not response.strip():
        raise BadRequest('Response is required')

    query = get_chatbot_service().knowledge_base.respond_to_unrecognized_query(
        query_id, response.strip(), client_id=g.client_id
    )
    return jsonify({'success': True, 'query': _serialize(query)})


@knowledge_bp.route('/<business_id>/documents', methods=['POST'])
@api_key_required
def create_document(business_id):
    data = get_json_body()
    title = data.get('title')
    content = data.get('content')
    if not title or not content:
        raise BadRequest('Title and content are required')

    doc_type = data.get('type', 'article')
    if doc_type not in DOCUMENT_TYPES:
        raise BadRequest(f"type must be one of {', '.join(sorted(DOCUMENT_TYPES))}")

    document = get_chatbot_service().knowledge_base.create_document(
        title=title,
        content=content,
        client_id=g.client_id,
        keywords=data.get('keywords'),
        categories=data.get('categories'),
        type=doc_type
    )
    return jsonify({'success': True, 'document': _serialize(document)}), 201
