from Staffluent.chatbot_agent.term_extractor import extract_key_terms, tokenize


def test_tokenize_drops_punctuation_and_apostrophes():
    assert tokenize("What's up, Staffluent?") == ['whats', 'up', 'staffluent']


def test_keeps_preserved_and_business_words():
    assert extract_key_terms("How do I create a project?") == ['how', 'create', 'project', 'how do i']


def test_drops_stop_words_and_short_words():
    assert extract_key_terms("What's the weather like") == ['weather']


def test_action_phrases_follow_words():
    terms = extract_key_terms("Do you offer time tracking")
    assert terms[:3] == ['offer', 'time', 'tracking']
    assert 'do you offer' in terms
    assert 'time tracking' in terms
    assert terms.index('do you offer') < terms.index('time tracking')


def test_duplicates_removed_in_order():
    assert extract_key_terms("task task tasks") == ['task', 'tasks']


def test_empty_message():
    assert extract_key_terms('') == []
    assert extract_key_terms(None) == []
