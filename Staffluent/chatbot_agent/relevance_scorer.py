from typing import Iterable, List

EXACT_MATCH = 1.0
SUB_WORD_MATCH = 0.8
PREFIX_SUFFIX_MATCH = 0.7
CONTAINS_MATCH = 0.4
FUZZY_MATCH = 0.3
PHRASE_MATCH = 1.5

PARTIAL_WEIGHT = 0.6
SHORT_QUERY_BONUS = 0.15
PHRASE_BONUS = 0.2
MOSTLY_EXACT_BONUS = 0.1


def _fuzzy_match(term: str, keyword: str) -> bool:
    """Plural, gerund, past tense and y/ies variants in either direction."""
    for a, b in ((term, keyword), (keyword, term)):
        if a + 's' == b or a + 'ing' == b or a + 'ed' == b:
            return True
        if a.endswith('y') and a[:-1] + 'ies' == b:
            return True
    return False


def _partial_score(term: str, keywords: List[str]) -> float:
    # First qualifying keyword wins
    for keyword in keywords:
        if (keyword.startswith(term) or term.startswith(keyword)
                or keyword.endswith(term) or term.endswith(keyword)):
            return PREFIX_SUFFIX_MATCH
        if term in keyword or keyword in term:
            return CONTAINS_MATCH
    if any(_fuzzy_match(term, keyword) for keyword in keywords):
        return FUZZY_MATCH
    return 0.0


def calculate_relevance_score(terms: Iterable[str], keywords: Iterable[str]) -> float:
    """
    Score how well a set of message terms matches a rule's keywords.

    Returns a value in [0, 1]. A message whose joined terms equal one of the
    keywords always scores 1.0.
    """
    terms = [term for term in terms if term]
    keywords = [keyword for keyword in keywords if keyword]
    if not terms or not keywords:
        return 0.0

    full_message = ' '.join(terms)
    if full_message in keywords:
        return 1.0

    phrase = sum(PHRASE_MATCH for keyword in keywords
                 if ' ' in keyword and keyword in full_message)

    if len(terms) == 1 and terms[0] in keywords:
        return 0.9

    keyword_set = set(keywords)
    sub_words = {word for keyword in keywords if ' ' in keyword for word in keyword.split()}

    exact = 0.0
    partial = 0.0
    for term in terms:
        if len(term) <= 2:
            continue
        if term in keyword_set:
            exact += EXACT_MATCH
        elif term in sub_words:
            exact += SUB_WORD_MATCH
        else:
            partial += _partial_score(term, keywords)

    total = exact + PARTIAL_WEIGHT * partial + phrase
    denominator = len(terms) + 0.5 * len(keywords) - 0.2 * phrase
    if denominator <= 0:
        return 1.0 if total > 0 else 0.0

    score = total / denominator
    if len(terms) <= 3:
        score += SHORT_QUERY_BONUS
    if phrase > 0:
        score += PHRASE_BONUS
    if exact > len(terms) / 2:
        score += MOSTLY_EXACT_BONUS

    return max(0.0, min(1.0, score))
