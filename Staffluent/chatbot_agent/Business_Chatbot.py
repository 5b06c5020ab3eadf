import logging
import re
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError
from werkzeug.exceptions import NotFound, Unauthorized

from .cleanup_guard import CleanupGuard, default_cleanup_guard
from .conversation_analyzer import is_closure, is_conversational, is_follow_up, match_conversational_intent
from .relevance_scorer import calculate_relevance_score
from .response_formatter import (format_knowledge_response, get_suggestions_from_document, merge_suggestions,
                                 personalize, personalize_response)
from .response_metadata import (TRACKED_SOURCES, closure_metadata, conversation_metadata, knowledge_metadata,
                                learned_metadata, nlp_metadata)
from .response_rules import (CLOSURE_RESPONSE, CONVERSATION_RESPONSES, DEFAULT_RESPONSE, FEATURE_INQUIRY_PATTERN,
                             PLATFORM_FEATURES, RESPONSE_RULES, SPECIFIC_QUESTION_PATTERN, SPECIFIC_QUESTIONS,
                             VIEW_RESPONSES, flatten_rules)
from .response_validator import OFF_TOPIC_PATTERNS, validate_learned_response
from .term_extractor import extract_key_terms

logger = logging.getLogger(__name__)

ERROR_RESPONSE_TEXT = "I'm sorry, I encountered an error while processing your request. Please try again."

RULE_MATCH_THRESHOLD = 0.3
RUNNER_UP_THRESHOLD = 0.5
UNRECOGNIZED_THRESHOLD = 0.3
VIEW_CONFIDENCE = 0.9
SPECIFIC_QUESTION_CONFIDENCE = 0.8
DEFAULT_CONFIDENCE = 0.1
HIGH_CONFIDENCE = 0.7
SHORT_MESSAGE_LENGTH = 20

GREETING_OR_HELP = re.compile(r"^(hi|hello|hey|help|what can you do)\b|\bhelp\b")
GREETING_PREFIX = re.compile(r"^(hello|hi|hey)\b[^.!?]*[.!?]\s*", re.IGNORECASE)


class BusinessChatbotService:
    """
    Rule-based chatbot for Staffluent businesses.

    A message runs through a fixed pipeline where the first stage that
    produces an answer wins: closure, small talk, feature questions answered
    from the knowledge base, learned responses, knowledge documents, and
    finally the canned response table. Every user and bot turn is stored.
    """

    def __init__(self, message_store, knowledge_base, directory,
                 response_rules: Optional[Dict[str, List[Dict]]] = None,
                 platform_name: str = 'Staffluent',
                 cleanup_guard: Optional[CleanupGuard] = None,
                 feedback_frequency: int = 5,
                 history_window: int = 5,
                 lookup_workers: int = 8):
        self.message_store = message_store
        self.knowledge_base = knowledge_base
        self.directory = directory
        self.rules = flatten_rules(response_rules if response_rules is not None else RESPONSE_RULES)
        self.platform_name = platform_name
        self.cleanup_guard = cleanup_guard or default_cleanup_guard
        self.feedback_frequency = feedback_frequency
        self.history_window = history_window
        self.lookup_workers = lookup_workers

    def initialize(self) -> Dict:
        try:
            self.knowledge_base.ensure_indexes()
        except PyMongoError as e:
            logger.error("Could not create knowledge base indexes: %s", e)
        return self._cleanup_learned_responses()

    def _cleanup_learned_responses(self) -> Dict:
        result = self.cleanup_guard.run_once(
            lambda: self.knowledge_base.cleanup_bad_responses(OFF_TOPIC_PATTERNS)
        )
        if not result.get('skipped'):
            logger.info("Learned response cleanup result: %s", result)
        return result

    # ------------------------------------------------------------------
    # Message processing
    # ------------------------------------------------------------------

    def process_message(self, business_id: str, client_id: str, user_id: Optional[str], message: str,
                        session_id: Optional[str] = None, context: Optional[Dict] = None) -> Dict[str, Any]:
        session_id = session_id or str(uuid.uuid4())
        context = dict(context or {})

        try:
            session_filter = {'businessId': business_id, 'clientId': client_id, 'sessionId': session_id}

            recent = self.message_store.find(session_filter, sort=DESCENDING, limit=self.history_window)
            context['conversationHistory'] = [
                {'content': turn.get('content'), 'sender': turn.get('sender')} for turn in reversed(recent)
            ]

            session_data = dict(context.get('sessionData') or {})
            if session_data.get('messageCount') is None:
                session_data['messageCount'] = self.message_store.count_documents(session_filter)
            context['sessionData'] = session_data
            context['sessionId'] = session_id
            context_snapshot = {k: v for k, v in context.items() if k != 'conversationHistory'}

            self.message_store.create({
                'businessId': business_id,
                'clientId': client_id,
                'userId': user_id,
                'sender': 'user',
                'content': message,
                'sessionId': session_id,
                'metadata': {'context': context_snapshot}
            })

            business = self.directory.find_business_by_id(business_id) or {}
            user = self.directory.find_user_by_id(user_id) if user_id else None

            response = self.generate_response(message, context, business, user)

            bot_message = self.message_store.create({
                'businessId': business_id,
                'clientId': client_id,
                'userId': user_id,
                'sender': 'bot',
                'content': response['text'],
                'suggestions': response['suggestions'],
                'sessionId': session_id,
                'metadata': dict(response['metadata'], context=context_snapshot)
            })

            return {
                'text': response['text'],
                'suggestions': response['suggestions'],
                'sessionId': session_id,
                'success': True,
                'responseSource': response['metadata']['responseSource'],
                'knowledgeUsed': response['metadata']['knowledgeUsed'],
                'metadata': response['metadata'],
                'messageId': str(bot_message['_id'])
            }
        except Exception:
            logger.exception("Error processing chatbot message for business %s", business_id)
            return {'text': ERROR_RESPONSE_TEXT, 'sessionId': session_id, 'success': False}

    def generate_response(self, message: str, context: Dict, business: Optional[Dict],
                          user: Optional[Dict]) -> Dict[str, Any]:
        """
        Pick the best response for a message.

        Returns a dict with ``text``, ``suggestions`` and ``metadata``; the
        metadata shape depends on the stage that answered.
        """
        self._cleanup_learned_responses()

        business = business or {}
        context = context or {}
        normalized = (message or '').lower().strip()
        names = self._placeholder_values(business, user)
        current_view = context.get('currentView')
        client_id = business.get('clientId')
        message_count = (context.get('sessionData') or {}).get('messageCount') or 0

        # 1. The user is wrapping up
        if is_closure(normalized):
            return self._build(personalize_response(CLOSURE_RESPONSE, names), closure_metadata())

        # 2. Small talk with a dedicated handler
        if is_conversational(normalized):
            intent = match_conversational_intent(normalized)
            if intent:
                return self._build(
                    personalize_response(CONVERSATION_RESPONSES[intent], self._with_time_of_day(names, normalized)),
                    conversation_metadata(intent)
                )

        search_options = {
            'client_id': client_id,
            'business_type': business.get('operationType') or 'default',
            'features': business.get('includedFeatures') or [],
            'current_view': current_view,
        }

        # 3. Questions about platform features go to the knowledge base first
        if FEATURE_INQUIRY_PATTERN.search(normalized) and any(f in normalized for f in PLATFORM_FEATURES):
            documents = self.knowledge_base.search_documents(normalized, limit=3, **search_options)
            if documents:
                return self._knowledge_response(documents[0], names)

        # 4. Previously learned answers
        query_terms = extract_key_terms(normalized)
        candidates = self.knowledge_base.search_query_responses(
            normalized, category=current_view or 'general', limit=3, client_id=client_id
        )
        if candidates:
            top = candidates[0]
            if validate_learned_response(normalized, top, query_terms, self.platform_name):
                self.knowledge_base.record_pair_use(top['_id'])
                match_score = top.get('similarity')
                if match_score is None:
                    match_score = calculate_relevance_score(query_terms, extract_key_terms(top.get('query') or ''))
                return self._build(
                    {
                        'text': personalize(top.get('response') or '', names),
                        'suggestions': [dict(s) for s in top.get('suggestions') or []],
                    },
                    learned_metadata(top, match_score)
                )
            logger.warning("Learned response %s rejected, continuing with knowledge search", top.get('_id'))

        # 5. Knowledge documents
        documents = self.knowledge_base.search_documents(normalized, limit=2, **search_options)
        if documents:
            return self._knowledge_response(documents[0], names)

        # 6. Canned responses
        history = context.get('conversationHistory') or []
        response, confidence = self._match_canned_response(normalized, query_terms, current_view,
                                                           is_follow_up(normalized, history))
        if response is None:
            response = personalize_response(DEFAULT_RESPONSE, dict(names, message=message))
            confidence = DEFAULT_CONFIDENCE
        else:
            response = personalize_response(response, names)

        should_show_feedback = (
            message_count % self.feedback_frequency == 0
            or confidence > HIGH_CONFIDENCE
            or len(normalized) < SHORT_MESSAGE_LENGTH
        )

        # 7. Remember what we could not answer
        unrecognized_id = None
        if confidence < UNRECOGNIZED_THRESHOLD:
            logged = self.knowledge_base.log_unrecognized_query(
                message,
                client_id=client_id,
                business_type=business.get('operationType'),
                user_id=str(user['_id']) if user and user.get('_id') else None,
                session_id=context.get('sessionId'),
                context={'currentView': current_view, 'messageCount': message_count}
            )
            if logged and logged.get('_id') is not None:
                unrecognized_id = str(logged['_id'])

        return self._build(response, nlp_metadata(confidence, should_show_feedback, unrecognized_id))

    def _match_canned_response(self, normalized: str, terms: List[str], current_view: Optional[str],
                               follow_up: bool):
        if current_view in VIEW_RESPONSES and (GREETING_OR_HELP.search(normalized) or len(normalized) < 5):
            return VIEW_RESPONSES[current_view], VIEW_CONFIDENCE

        specific = SPECIFIC_QUESTION_PATTERN.search(normalized)
        if specific:
            verb, item = specific.groups()
            for question_verb, item_pattern, response in SPECIFIC_QUESTIONS:
                if question_verb == verb and re.fullmatch(item_pattern, item):
                    return response, SPECIFIC_QUESTION_CONFIDENCE

        best, best_score, runner_up, runner_up_score = None, 0.0, None, 0.0
        for rule in self.rules:
            score = calculate_relevance_score(terms, rule['keywords'])
            if score > best_score:
                runner_up, runner_up_score = best, best_score
                best, best_score = rule, score
            elif score > runner_up_score:
                runner_up, runner_up_score = rule, score

        if best is None or best_score <= RULE_MATCH_THRESHOLD:
            return None, 0.0

        response = best['response']
        if follow_up:
            suggestions = response.get('suggestions') or []
            if runner_up is not None and runner_up_score > RUNNER_UP_THRESHOLD:
                suggestions = merge_suggestions(suggestions, runner_up['response'].get('suggestions') or [])
            response = {'text': GREETING_PREFIX.sub('', response['text'], count=1), 'suggestions': suggestions}
        return response, best_score

    def _knowledge_response(self, document: Dict, names: Dict[str, str]) -> Dict[str, Any]:
        return self._build(
            {
                'text': format_knowledge_response(document.get('content'), names),
                'suggestions': get_suggestions_from_document(document),
            },
            knowledge_metadata(document)
        )

    def _placeholder_values(self, business: Dict, user: Optional[Dict]) -> Dict[str, str]:
        return {
            'businessName': business.get('name') or 'your business',
            'userName': (user or {}).get('name') or 'there',
            'platformName': self.platform_name,
        }

    @staticmethod
    def _with_time_of_day(names: Dict[str, str], normalized: str) -> Dict[str, str]:
        match = re.match(r"^good (morning|afternoon|evening|day)", normalized)
        return dict(names, timeOfDay=match.group(1) if match else 'day')

    @staticmethod
    def _build(response: Dict, metadata: Dict) -> Dict[str, Any]:
        return {
            'text': response['text'],
            'suggestions': list(response.get('suggestions') or []),
            'metadata': dict(metadata),
        }

    # ------------------------------------------------------------------
    # History and sessions
    # ------------------------------------------------------------------

    def get_conversation_history(self, business_id: str, client_id: str, user_id: Optional[str] = None,
                                 session_id: Optional[str] = None, limit: int = 20, page: int = 1) -> Dict:
        try:
            history_filter = {'businessId': business_id, 'clientId': client_id}
            if user_id:
                history_filter['userId'] = user_id
            if session_id:
                history_filter['sessionId'] = session_id

            total = self.message_store.count_documents(history_filter)
            messages = self.message_store.find(history_filter, sort=DESCENDING, limit=limit,
                                               skip=(page - 1) * limit)

            return {
                'messages': [self._serialize_message(m) for m in reversed(messages)],
                'total': total,
                'page': page,
                'limit': limit,
                'success': True
            }
        except Exception as e:
            logger.error("Error fetching conversation history for business %s: %s", business_id, e)
            raise

    def clear_chat_history(self, business_id: str, client_id: str, session_id: Optional[str]) -> Dict:
        if not session_id:
            return {'success': False, 'deletedCount': 0}
        try:
            deleted = self.message_store.delete_many(
                {'businessId': business_id, 'clientId': client_id, 'sessionId': session_id}
            )
            return {'success': True, 'deletedCount': deleted}
        except Exception as e:
            logger.error("Error clearing chat history for session %s: %s", session_id, e)
            return {'success': False, 'deletedCount': 0}

    def get_active_sessions(self, business_id: str, client_id: str, limit: int = 20, page: int = 1) -> Dict:
        sessions = self.message_store.aggregate_sessions(business_id, client_id, skip=(page - 1) * limit,
                                                         limit=limit)
        total = self.message_store.count_sessions(business_id, client_id)

        users: List[Optional[Dict]] = []
        if sessions:
            with ThreadPoolExecutor(max_workers=min(self.lookup_workers, len(sessions))) as executor:
                users = list(executor.map(self._lookup_session_user, sessions))

        return {
            'sessions': [
                {
                    'sessionId': session['_id'],
                    'lastMessage': session.get('lastMessage'),
                    'lastMessageTime': self._iso(session.get('lastMessageTime')),
                    'messageCount': session.get('messageCount', 0),
                    'user': user
                }
                for session, user in zip(sessions, users)
            ],
            'total': total,
            'page': page,
            'limit': limit,
            'success': True
        }

    def _lookup_session_user(self, session: Dict) -> Optional[Dict]:
        user_id = session.get('userId')
        if not user_id:
            return None
        try:
            user = self.directory.find_user_by_id(user_id)
        except Exception as e:
            logger.warning("User lookup failed for session %s: %s", session.get('_id'), e)
            return None
        if not user:
            return None
        return {'id': str(user['_id']), 'name': user.get('name'), 'email': user.get('email')}

    # ------------------------------------------------------------------
    # Feedback and access
    # ------------------------------------------------------------------

    def record_message_feedback(self, business_id: str, client_id: str, message_id: str, was_helpful: bool,
                                feedback_text: Optional[str] = None, source_id: Optional[str] = None) -> Dict:
        message = self.message_store.find_one({
            '_id': message_id,
            'businessId': business_id,
            'clientId': client_id,
            'sender': 'bot'
        })
        if not message:
            logger.warning("Feedback for unknown message %s", message_id)
            return {'success': False, 'error': 'Message not found'}

        metadata = dict(message.get('metadata') or {})
        feedback = {'wasHelpful': bool(was_helpful), 'timestamp': datetime.now(timezone.utc)}
        if feedback_text:
            feedback['feedbackText'] = feedback_text
        metadata['feedback'] = feedback
        self.message_store.update_metadata(message['_id'], metadata)
        logger.info("Feedback received for message %s: helpful=%s", message_id, bool(was_helpful))

        target_id = source_id
        if target_id is None and metadata.get('responseSource') in TRACKED_SOURCES:
            target_id = metadata.get('sourceId')

        source_updated = False
        if target_id:
            try:
                self.knowledge_base.update_response_success(target_id, bool(was_helpful), client_id=client_id)
                source_updated = True
            except NotFound as e:
                logger.warning("Could not update success rate for %s: %s", target_id, e.description)

        return {'success': True, 'sourceUpdated': source_updated}

    def validate_business_api_key(self, business_id: str, api_key: Optional[str]) -> Dict:
        if not api_key:
            raise Unauthorized('Business API key is required')
        business = self.directory.find_business_by_id_and_api_key(business_id, api_key)
        if not business:
            raise Unauthorized('Invalid business API key')
        return business

    @classmethod
    def _serialize_message(cls, message: Dict) -> Dict:
        serialized = {k: v for k, v in message.items() if k != '_id'}
        serialized['id'] = str(message.get('_id'))
        for key in ('createdAt', 'updatedAt'):
            if key in serialized:
                serialized[key] = cls._iso(serialized[key])
        return serialized

    @staticmethod
    def _iso(value):
        return value.isoformat() if isinstance(value, datetime) else value
