from .models import Word


def hint_text(word: Word, hints_used: int) -> str:
    """Progressive hint: each hint reveals one more letter of a synonym.

    The last letter is never shown, and the canonical set is never changed
    by a hint.
    """
    target = word.synonyms[0]
    shown = max(1, min(hints_used, len(target) - 1))
    masked = target[:shown] + "_" * (len(target) - shown)
    return (
        f"One synonym of '{word.word}' ({len(word.synonyms)} in total) "
        f"looks like: {masked}"
    )
