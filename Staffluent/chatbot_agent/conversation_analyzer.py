import re
from typing import Dict, List, Optional

from .term_extractor import BUSINESS_TERMS, PRESERVE_WORDS

CONVERSATIONAL_PATTERNS = [
    re.compile(r"^(hi|hello|hey|howdy|greetings|hiya|yo)\b"),
    re.compile(r"^(how are you|how're you|how's it going|how is it going|how are things|how do you do|how you doing)"),
    re.compile(r"^(what's up|whats up|what is up|sup)\b"),
    re.compile(r"^good (morning|afternoon|evening|day)\b"),
    re.compile(r"^(nice|pleased|glad) to meet you"),
]

# Only the bare phrase, optionally followed by a name and punctuation.
# A trailing topic word such as "hi tasks" is not a name.
CONVERSATIONAL_INTENTS = [
    ('greeting', re.compile(r"^(hi|hello|hey|howdy|greetings|hiya)( there)?[\s,!.]*(?P<name>\w+)?[\s!.]*$")),
    ('how_are_you', re.compile(
        r"^(how are you|how're you|how's it going|how is it going|how are things|how do you do|how you doing)"
        r"( today| doing)?[\s?!.]*$")),
    ('whats_up', re.compile(r"^(what's up|whats up|what is up|sup)[\s?!.]*$")),
    ('time_of_day', re.compile(r"^good (morning|afternoon|evening|day)( there)?[\s,!.]*(?P<name>\w+)?[\s!.]*$")),
]

CLOSURE_PATTERNS = [
    re.compile(r"^(that's all|thats all|that is all|that's it|thats it|that will be all)\b"),
    re.compile(r"^no,? thanks?\b"),
    re.compile(r"^no,? thank you\b"),
    re.compile(r"^(nothing else|nothing more|no more questions)\b"),
    re.compile(r"^(i'm good|im good|i am good|i'm fine|i am fine|all good)\b"),
    re.compile(r"^(bye|goodbye|good bye|see you|see ya|later|have a good (day|one))\b"),
    re.compile(r"^(ok|okay|k|got it|alright|all right)[\s,]*(thanks|thank you)?[\s!.]*$"),
]

FOLLOW_UP_PREFIXES = [
    'why', 'how', 'what about', 'and', 'but', 'then', 'so', 'also',
    'can you', 'could you', 'would', 'what if', 'is it', 'does it',
]

FOLLOW_UP_PHRASES = [' also', ' instead', ' again', ' as well', ' too', ' more about', ' the same']

STANDALONE_PRONOUN = re.compile(r"\b(it|its|they|them|this|that|these|those|one)\b")
CONCRETE_SUBJECT = re.compile(r"\b(projects?|tasks?|teams?|features?|chat|reports?|time|staffluent)\b")


def _normalize(message: str) -> str:
    return (message or '').lower().strip()


def is_conversational(message: str) -> bool:
    normalized = _normalize(message)
    return any(pattern.search(normalized) for pattern in CONVERSATIONAL_PATTERNS)


def match_conversational_intent(message: str) -> Optional[str]:
    """Return the name of the small-talk handler for this message, if any."""
    normalized = _normalize(message)
    for intent, pattern in CONVERSATIONAL_INTENTS:
        match = pattern.match(normalized)
        if not match:
            continue
        name = match.groupdict().get('name')
        if name and (name in BUSINESS_TERMS or name in PRESERVE_WORDS):
            return None
        return intent
    return None


def is_closure(message: str) -> bool:
    normalized = _normalize(message)
    return any(pattern.search(normalized) for pattern in CLOSURE_PATTERNS)


def is_follow_up(message: str, history: Optional[List[Dict]]) -> bool:
    """
    Decide whether the message continues the recent exchange.

    The history must hold at least two turns with both a bot and a user turn
    among the last three. The message then counts as a follow-up when it is
    very short, opens like a follow-up, repeats a follow-up phrase, or leans
    on a pronoun without naming a concrete subject.
    """
    if not history or len(history) < 2:
        return False

    recent = history[-3:]
    senders = {turn.get('sender') for turn in recent}
    if 'bot' not in senders or 'user' not in senders:
        return False

    normalized = _normalize(message)
    if not normalized:
        return False

    if len(normalized.split()) <= 3:
        return True

    for prefix in FOLLOW_UP_PREFIXES:
        if normalized == prefix or normalized.startswith(prefix + ' '):
            return True

    padded = ' ' + normalized + ' '
    if any(phrase + ' ' in padded for phrase in FOLLOW_UP_PHRASES):
        return True

    return bool(STANDALONE_PRONOUN.search(normalized)) and not CONCRETE_SUBJECT.search(normalized)
