import pytest

from Staffluent.chatbot_agent.conversation_analyzer import (is_closure, is_conversational, is_follow_up,
                                                            match_conversational_intent)

HISTORY = [
    {'content': 'tell me about projects', 'sender': 'user'},
    {'content': 'Projects in Staffluent help you plan work.', 'sender': 'bot'},
]


@pytest.mark.parametrize('message', ['Hello', 'hi there', 'Good morning!', "what's up", 'nice to meet you',
                                     'hello, how do I create a project'])
def test_conversational(message):
    assert is_conversational(message)


@pytest.mark.parametrize('message', ['how do I create a project', 'show me reports', ''])
def test_not_conversational(message):
    assert not is_conversational(message)


@pytest.mark.parametrize('message, intent', [
    ('hello', 'greeting'),
    ('Hi there, Sam!', 'greeting'),
    ('how are you today?', 'how_are_you'),
    ('whats up', 'whats_up'),
    ('good evening', 'time_of_day'),
])
def test_intent_handlers(message, intent):
    assert match_conversational_intent(message) == intent


def test_greeting_with_question_has_no_handler():
    assert match_conversational_intent('hello, how do I create a project') is None


@pytest.mark.parametrize('message', ["That's all", 'no thanks', 'Nothing else', "I'm good", 'bye!', 'ok',
                                     'okay thanks', 'got it'])
def test_closure(message):
    assert is_closure(message)


@pytest.mark.parametrize('message', ['ok so how do I add a task', 'tell me about tasks', 'okay, what about reports'])
def test_not_closure(message):
    assert not is_closure(message)


def test_follow_up_needs_history():
    assert not is_follow_up('what about tasks', [])
    assert not is_follow_up('what about tasks', HISTORY[:1])


def test_follow_up_needs_both_speakers():
    history = [{'content': 'a', 'sender': 'user'}, {'content': 'b', 'sender': 'user'}]
    assert not is_follow_up('and tasks?', history)


@pytest.mark.parametrize('message', [
    'and tasks?',
    'what about the reporting side of things',
    'could you show me how to share the project board',
    'i would like to see that once more please',
])
def test_follow_up(message):
    assert is_follow_up(message, HISTORY)


def test_standalone_question_is_not_follow_up():
    assert not is_follow_up('where do i see my team schedule for next week', HISTORY)


@pytest.mark.parametrize('message', ['hello projects', 'hi tasks', 'Hey, reports!', 'good morning help'])
def test_greeting_followed_by_topic_has_no_handler(message):
    assert match_conversational_intent(message) is None
