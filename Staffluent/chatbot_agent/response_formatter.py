import re
from typing import Dict, List

SUMMARY_THRESHOLD = 500
MAX_SUGGESTIONS = 4

CATEGORY_SUGGESTIONS = {
    'project_management': 'About project management',
    'task_management': 'About task management',
    'time_tracking': 'About time tracking',
    'team_management': 'About team management',
    'client_management': 'About client management',
    'communication': 'About team communication',
    'reporting': 'About reporting features',
    'field_service': 'About field service',
    'equipment': 'About equipment management',
    'quality_control': 'About quality control',
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def personalize(text: str, names: Dict[str, str]) -> str:
    """Substitute {businessName}, {userName}, {platformName} and friends."""
    for key, value in names.items():
        text = text.replace('{' + key + '}', value)
    return text


def personalize_response(response: Dict, names: Dict[str, str]) -> Dict:
    return {
        'text': personalize(response['text'], names),
        'suggestions': [dict(s) for s in response.get('suggestions') or []],
    }


def format_knowledge_response(content: str, names: Dict[str, str]) -> str:
    """Turn a knowledge document into a conversational reply."""
    user_name = names.get('userName', 'there')
    response = personalize(content or '', names).strip()

    if len(response) > SUMMARY_THRESHOLD:
        sentences = [s.strip() for s in _SENTENCE_SPLIT.split(response) if s.strip()]
        if len(sentences) > 5:
            response = '. '.join(sentences[:3]) + '.'
            response += " I hope this helps! Let me know if you'd like more details."

    if response and user_name not in response and 'you' not in response:
        response = f"{user_name}, {response[0].lower()}{response[1:]}"

    if 'API' in response or 'config' in response or 'settings' in response:
        response += " Would you like me to explain any specific part in more detail?"

    if 'project' in response and 'create a project' not in response:
        response += " You can easily create a new project or view existing ones from your dashboard."
    elif 'task' in response and 'assign tasks' not in response:
        response += " Tasks can be assigned to team members with just a few clicks."
    elif 'report' in response and 'generate reports' not in response:
        response += " Reports can be generated and exported in various formats."

    return response


def _pick(content: str, options, default: str) -> str:
    for keyword, text in options:
        if keyword in content:
            return text
    return default


def get_suggestions_from_document(document: Dict) -> List[Dict[str, str]]:
    """Build up to four action suggestions from a knowledge document."""
    content = (document.get('content') or '').lower()
    suggestions = []

    if any(word in content for word in ('create', 'add', 'set up')):
        suggestions.append({'id': 'action_create', 'text': _pick(
            content, [('project', 'Create a project'), ('task', 'Create a task'), ('team', 'Add team member')],
            'Create new')})

    if any(word in content for word in ('view', 'see', 'check')):
        suggestions.append({'id': 'action_view', 'text': _pick(
            content, [('project', 'View projects'), ('task', 'View tasks'), ('team', 'View team'),
                      ('report', 'View reports')],
            'View dashboard')})

    if any(word in content for word in ('export', 'download', 'share')):
        suggestions.append({'id': 'action_export', 'text': _pick(
            content, [('report', 'Export report'), ('data', 'Export data')], 'Share')})

    if not suggestions:
        suggestions.append({'id': 'more_info', 'text': 'Tell me more about this'})

    for category in document.get('categories') or []:
        if category in CATEGORY_SUGGESTIONS and len(suggestions) < 3:
            suggestions.append({'id': f'category_{category}', 'text': CATEGORY_SUGGESTIONS[category]})

    if len(suggestions) < MAX_SUGGESTIONS:
        suggestions.append({'id': 'help_tutorial', 'text': _pick(
            content, [('project', 'Project tutorials'), ('task', 'Task tutorials'), ('team', 'Team tutorials'),
                      ('time', 'Time tracking help')],
            'View tutorials')})

    if len(suggestions) < 3:
        for keyword in (document.get('keywords') or [])[:3 - len(suggestions)]:
            if len(keyword) > 3:
                suggestions.append({'id': f'keyword_{keyword}', 'text': f'More about {keyword}'})

    return suggestions[:MAX_SUGGESTIONS]


def merge_suggestions(primary: List[Dict], secondary: List[Dict], limit: int = MAX_SUGGESTIONS) -> List[Dict]:
    merged = list(primary)
    seen = {s['id'] for s in primary}
    for suggestion in secondary:
        if len(merged) >= limit:
            break
        if suggestion['id'] not in seen:
            merged.append(suggestion)
            seen.add(suggestion['id'])
    return merged[:limit]
