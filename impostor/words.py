# impostor/words.py
import random
from typing import List, Optional, Sequence, Tuple


def pick_word(
    theme_words: Sequence[str],
    played_words: Sequence[str],
    rng: Optional[random.Random] = None,
) -> Tuple[str, List[str]]:
    """
    Pick a word that hasn't been played yet in this theme cycle.

    Returns the word and the new played-words history. Once every word of
    the theme has been played the history is reset and the whole theme is
    available again.
    """
    if not theme_words:
        raise ValueError("theme has no words")

    rng = rng or random
    history = list(played_words)
    available = [w for w in theme_words if w not in history]

    if not available:
        history = []
        available = list(theme_words)

    word = rng.choice(available)
    history.append(word)
    return word, history
