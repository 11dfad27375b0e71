"""
Stopwords

Common English words that carry no routing signal and are dropped during
keyword extraction. Technical terms (code, test, api, ...) are deliberately
not stopwords.
"""

from typing import FrozenSet

ENGLISH_STOPWORDS: FrozenSet[str] = frozenset(
    [
        # Articles
        "a", "an", "the",
        # Conjunctions
        "and", "or", "but", "nor", "yet", "so",
        # Prepositions
        "in", "on", "at", "to", "for", "of", "with", "from", "about",
        "into", "through", "during", "before", "after", "above", "below",
        "between", "under", "over", "behind", "beside",
        # Pronouns
        "i", "you", "he", "she", "it", "we", "they",
        "me", "him", "her", "us", "them",
        "my", "your", "his", "its", "our", "their",
        "mine", "yours", "hers", "ours", "theirs",
        "this", "that", "these", "those",
        # Auxiliary and modal verbs
        "is", "are", "was", "were", "am",
        "be", "been", "being",
        "have", "has", "had", "having",
        "do", "does", "did", "doing",
        "will", "would", "should", "could", "can", "may", "might", "must",
        "shall",
        # Adverbs
        "not", "very", "too", "also", "just", "only",
        # Questions
        "what", "when", "where", "who", "which", "why", "how",
        # Other
        "as", "by", "if", "than", "then", "now",
        "some", "any", "all", "each", "every",
        "more", "most", "less", "least",
        "such", "own", "same", "other",
        "here", "there", "whether",
    ]
)


def get_default_stopwords() -> FrozenSet[str]:
    """Get the default stopword set used by keyword extraction"""
    return ENGLISH_STOPWORDS


def is_stopword(word: str) -> bool:
    return word.lower() in ENGLISH_STOPWORDS
