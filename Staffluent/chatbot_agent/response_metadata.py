"""
Metadata attached to bot messages, one shape per response source.

Each builder only emits the fields its source actually produces, so code
reading stored messages can rely on the ``responseSource`` tag to know which
keys exist.
"""
from typing import List, Optional, TypedDict

CLOSURE = 'closure'
CONVERSATION = 'conversation'
KNOWLEDGE = 'knowledge'
LEARNED = 'learned'
NLP = 'nlp'

RESPONSE_SOURCES = (CLOSURE, CONVERSATION, KNOWLEDGE, LEARNED, NLP)

# Sources whose sourceId points at a knowledge base record that tracks success
TRACKED_SOURCES = (KNOWLEDGE, LEARNED)


class _BaseMetadata(TypedDict):
    responseSource: str
    knowledgeUsed: bool
    shouldShowFeedback: bool


class ClosureMetadata(_BaseMetadata):
    pass


class ConversationMetadata(_BaseMetadata):
    intent: str


class KnowledgeMetadata(_BaseMetadata):
    sourceId: str
    documentTitle: Optional[str]
    documentCategories: List[str]


class LearnedMetadata(_BaseMetadata):
    sourceId: str
    matchScore: float


class NlpMetadata(_BaseMetadata, total=False):
    confidence: float
    sourceId: str
    unrecognized: bool


def closure_metadata() -> ClosureMetadata:
    return {'responseSource': CLOSURE, 'knowledgeUsed': False, 'shouldShowFeedback': False}


def conversation_metadata(intent: str) -> ConversationMetadata:
    return {
        'responseSource': CONVERSATION,
        'knowledgeUsed': False,
        'shouldShowFeedback': False,
        'intent': intent,
    }


def knowledge_metadata(document: dict) -> KnowledgeMetadata:
    return {
        'responseSource': KNOWLEDGE,
        'knowledgeUsed': True,
        'shouldShowFeedback': True,
        'sourceId': str(document.get('_id')),
        'documentTitle': document.get('title'),
        'documentCategories': list(document.get('categories') or []),
    }


def learned_metadata(pair: dict, match_score: float) -> LearnedMetadata:
    return {
        'responseSource': LEARNED,
        'knowledgeUsed': True,
        'shouldShowFeedback': True,
        'sourceId': str(pair.get('_id')),
        'matchScore': round(match_score, 3),
    }


def nlp_metadata(confidence: float, should_show_feedback: bool,
                 unrecognized_id: Optional[str] = None) -> NlpMetadata:
    metadata: NlpMetadata = {
        'responseSource': NLP,
        'knowledgeUsed': False,
        'shouldShowFeedback': should_show_feedback,
        'confidence': confidence,
    }
    if unrecognized_id is not None:
        metadata['sourceId'] = unrecognized_id
        metadata['unrecognized'] = True
        metadata['shouldShowFeedback'] = True
    return metadata
