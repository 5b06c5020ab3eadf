import re
from typing import List

STOP_WORDS = {
    'a', 'an', 'the', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'and', 'or', 'but', 'if', 'then', 'else', 'all', 'any', 'both', 'each',
    'few', 'more', 'most', 'some', 'such', 'no', 'nor', 'not', 'only', 'own',
    'same', 'so', 'than', 'too', 'very', 'can', 'will', 'just', 'should',
    'now', 'about', 'i', 'me', 'my', 'mine', 'myself', 'we', 'our', 'ours',
    'you', 'your', 'yours', 'yourself', 'it', 'its', 'itself', 'they',
    'them', 'their', 'this', 'that', 'these', 'those', 'for', 'of', 'with',
    'by', 'at', 'from', 'to', 'in', 'on', 'do', 'does', 'did', 'have', 'has',
    'had', 'would', 'could', 'there', 'here', 'into', 'over', 'also', 'like',
    'want', 'need', 'please', 'really', 'much', 'many', 'well', 'still',
    'tell', 'know', 'something', 'anything', 'thing', 'things',
    'doing', 'done', 'other', 'whats', 'dont', 'cant',
}

# Interrogatives, courtesy words and action verbs survive even when short
PRESERVE_WORDS = {
    'how', 'what', 'who', 'why', 'when', 'where', 'which',
    'hi', 'hello', 'hey', 'thanks', 'thank', 'thx', 'bye',
    'help', 'create', 'add', 'make', 'assign', 'track', 'manage', 'view',
    'use', 'set', 'setup', 'start', 'find', 'get', 'export', 'offer',
}

BUSINESS_TERMS = {
    'project', 'projects', 'task', 'tasks', 'team', 'teams', 'staff',
    'chat', 'chats', 'message', 'messages', 'messaging', 'communication',
    'time', 'clock', 'hours', 'timesheet', 'shift', 'shifts', 'schedule',
    'report', 'reports', 'dashboard', 'analytics', 'client', 'clients',
    'customer', 'portal', 'field', 'site', 'equipment', 'inventory',
    'quality', 'inspection', 'safety', 'osha', 'compliance', 'audit',
    'app', 'api', 'mobile', 'price', 'pricing', 'plan', 'cost',
    'feature', 'features', 'tool', 'tools', 'staffluent',
}

ACTION_PHRASES = [
    'how to', 'how do i', 'how can i', 'how are you', 'do you offer',
    'do you have', 'do you support', 'is there', 'can you', 'tell me about',
    'help me', 'what is', 'what are', 'who is', 'who are', 'what can',
    'what does', 'get started', 'time tracking', 'field service',
]

_PUNCTUATION = re.compile(r"[^\w\s]")


def tokenize(message: str) -> List[str]:
    """Lower-case the message, drop punctuation and split on whitespace."""
    return _PUNCTUATION.sub('', message.lower()).split()


def extract_key_terms(message: str) -> List[str]:
    """
    Reduce a free-text message to its significant terms.

    Words come first in message order, followed by any matched action
    phrases in table order. Duplicates are removed, so the result behaves
    like a set while keeping scoring deterministic.
    """
    if not message:
        return []

    words = [
        word for word in tokenize(message)
        if word in PRESERVE_WORDS
        or word in BUSINESS_TERMS
        or (len(word) > 3 and word not in STOP_WORDS)
    ]

    lowered = message.lower()
    phrases = [phrase for phrase in ACTION_PHRASES if phrase in lowered]

    return list(dict.fromkeys(words + phrases))
