from functools import wraps

from flask import g, request
from werkzeug.exceptions import BadRequest

from .services import get_chatbot_service

API_KEY_HEADER = 'business-x-api-key'
MAX_PAGE_SIZE = 100


def api_key_required(f):
    """Resolve the business from the URL and API key header into ``g.business``."""
    @wraps(f)
    def wrap(business_id, *args, **kwargs):
        g.business = get_chatbot_service().validate_business_api_key(
            business_id, request.headers.get(API_KEY_HEADER)
        )
        g.client_id = str(g.business.get('clientId') or '')
        return f(business_id, *args, **kwargs)
    return wrap


def get_pagination(default_limit=20):
    try:
        limit = int(request.args.get('limit', default_limit))
        page = int(request.args.get('page', 1))
    except ValueError:
        raise BadRequest('limit and page must be integers')
    if limit < 1 or page < 1:
        raise BadRequest('limit and page must be positive')
    return min(limit, MAX_PAGE_SIZE), page


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data
