from synquest.hints import hint_text
from synquest.models import Word


def word():
    return Word(id="w1", word="cheerful", synonyms=["happy", "joyful", "glad"])


def test_hint_reveals_more_letters_each_time():
    assert "h____" in hint_text(word(), 1)
    assert "ha___" in hint_text(word(), 2)


def test_hint_never_reveals_whole_synonym():
    assert "happ_" in hint_text(word(), 10)


def test_hint_mentions_synonym_count():
    assert "(3 in total)" in hint_text(word(), 1)


def test_hint_leaves_synonyms_untouched():
    w = word()
    hint_text(w, 3)
    assert w.synonyms == ["happy", "joyful", "glad"]
