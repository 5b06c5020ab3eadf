from flask import Blueprint, g, jsonify, request
from werkzeug.exceptions import BadRequest

from Staffluent.app.services import get_chatbot_service
from Staffluent.app.utils import api_key_required, get_json_body, get_pagination

chatbot_bp = Blueprint('business_chatbot', __name__, url_prefix='/business-chatbot')


@chatbot_bp.route('/<business_id>/message', methods=['POST'])
@api_key_required
def send_message(business_id):
    data = get_json_body()
    message = data.get('message')
    if not isinstance(message, str) or not message.strip():
        raise BadRequest('Message is required')

    context = data.get('context') or {}
    if not isinstance(context, dict):
        raise BadRequest('Context must be an object')

    result = get_chatbot_service().process_message(
        business_id=business_id,
        client_id=g.client_id,
        user_id=data.get('userId'),
        message=message.strip(),
        session_id=data.get('sessionId'),
        context=context
    )
    return jsonify(result)


@chatbot_bp.route('/<business_id>/history', methods=['GET'])
@api_key_required
def get_history(business_id):
    limit, page = get_pagination()
    result = get_chatbot_service().get_conversation_history(
        business_id,
        g.client_id,
        user_id=request.args.get('userId'),
        session_id=request.args.get('sessionId'),
        limit=limit,
        page=page
    )
    return jsonify(result)


@chatbot_bp.route('/<business_id>/history', methods=['DELETE'])
@api_key_required
def clear_history(business_id):
    result = get_chatbot_service().clear_chat_history(business_id, g.client_id, request.args.get('sessionId'))
    return jsonify(result)


@chatbot_bp.route('/<business_id>/sessions', methods=['GET'])
@api_key_required
def get_sessions(business_id):
    limit, page = get_pagination()
    return jsonify(get_chatbot_service().get_active_sessions(business_id, g.client_id, limit=limit, page=page))


@chatbot_bp.route('/<business_id>/feedback', methods=['POST'])
@api_key_required
def record_feedback(business_id):
    data = get_json_body()
    if not data.get('messageId'):
        raise BadRequest('messageId is required')
    if not isinstance(data.get('wasHelpful'), bool):
        raise BadRequest('wasHelpful must be true or false')

    result = get_chatbot_service().record_message_feedback(
        business_id,
        g.client_id,
        data['messageId'],
        data['wasHelpful'],
        feedback_text=data.get('feedbackText'),
        source_id=data.get('sourceId')
    )
    return jsonify(result)
