import logging
import re
from typing import Dict, Iterable

from .term_extractor import extract_key_terms

logger = logging.getLogger(__name__)

UNRELATED_TOPICS = ['sports', 'weather', 'cooking', 'politics', 'entertainment', 'music', 'movies']

FEATURE_TERMS = ['chat', 'project', 'task', 'time', 'team', 'report', 'dashboard', 'communication']

MIN_SIMILARITY = 0.6

# Learned responses matching any of these are off-topic for a workforce platform.
# The same list drives the one-time cleanup of the learned store.
OFF_TOPIC_PATTERNS = [
    re.compile(r"\byes,? i know about\b", re.IGNORECASE),
    re.compile(r"\b(sports?|football|basketball|soccer|baseball)\b", re.IGNORECASE),
    re.compile(r"\b(recipes?|cooking)\b", re.IGNORECASE),
    re.compile(r"\b(politics|political|elections?)\b", re.IGNORECASE),
    re.compile(r"\b(movies?|celebrit(y|ies)|tv shows?)\b", re.IGNORECASE),
]

GENERIC_REJECTION_PATTERNS = [
    re.compile(r"purpose of this chat", re.IGNORECASE),
    re.compile(r"i can only (help|assist|answer)", re.IGNORECASE),
    re.compile(r"(outside|beyond) (the scope|my scope)", re.IGNORECASE),
    re.compile(r"i'?m not able to help with that", re.IGNORECASE),
]


def _mentions_feature(terms: Iterable[str]) -> bool:
    return any(term.startswith(feature) for term in terms for feature in FEATURE_TERMS)


def validate_learned_response(query: str, candidate: Dict, query_terms: Iterable[str],
                              platform_name: str = 'Staffluent') -> bool:
    """
    Decide whether a previously learned response can be reused for this query.

    Rejections are logged as warnings with the reason so drift in the learned
    store stays visible.
    """
    query_terms = list(query_terms)
    normalized_query = (query or '').lower()
    response = (candidate.get('response') or '').lower()

    def reject(reason):
        logger.warning(
            "Rejected learned response %s for query %r: %s",
            candidate.get('_id'), query, reason
        )
        return False

    for topic in UNRELATED_TOPICS:
        if topic in response and topic not in normalized_query:
            return reject(f"mentions unrelated topic '{topic}'")

    for pattern in OFF_TOPIC_PATTERNS:
        if pattern.search(response):
            return reject(f"matches off-topic pattern {pattern.pattern}")

    asks_about_feature = _mentions_feature(query_terms)
    if asks_about_feature:
        if not any(feature in response for feature in FEATURE_TERMS) \
                and platform_name.lower() not in response:
            return reject("feature question answered without any feature")

    similarity = candidate.get('similarity')
    if similarity is not None and similarity < MIN_SIMILARITY:
        return reject(f"similarity {similarity:.2f} below {MIN_SIMILARITY}")

    if len(query_terms) > 1:
        learned_terms = {term for term in extract_key_terms(candidate.get('query') or '') if len(term) > 3}
        current_terms = {term for term in query_terms if len(term) > 3}
        if not learned_terms & current_terms:
            return reject("no terms shared with the learned query")

    if asks_about_feature and any(pattern.search(response) for pattern in GENERIC_REJECTION_PATTERNS):
        return reject("generic rejection for a feature question")

    return True
