"""
TF-IDF Weight Calculator

Builds an inverse-document-frequency table over the descriptive text of an
agent pool and scores how relevant a document is to a set of query tokens.
"""

from typing import Dict, Iterable, List
import logging
import math
import re

from .agents import AgentProfile

logger = logging.getLogger(__name__)

WORD_SEPARATORS = " \t\n\r,.!?;:-_"

_SPLIT_PATTERN = re.compile("[" + re.escape(WORD_SEPARATORS) + "]+")


def split_words(text: str) -> List[str]:
    """Split text on word separators, dropping empty fragments"""
    return [word for word in _SPLIT_PATTERN.split(text) if word]


class TfidfWeightCalculator:
    """
    TF-IDF scorer for one snapshot of an agent pool.

    IDF(token) = log(N / (df(token) + 1)), where N is the pool size and df
    counts the agents whose document text contains the token. A token present
    in every document therefore has a negative IDF.

    The table is fixed at construction; build a new calculator when the pool
    changes.
    """

    def __init__(self, agents: Iterable[AgentProfile]):
        """
        Initialize calculator.

        Args:
            agents: Agent pool to build IDF scores from
        """
        agents = list(agents)
        self._total_documents = len(agents)
        self._idf_scores = self._calculate_idf(agents)

        logger.debug(
            f"Built IDF table: documents={self._total_documents}, "
            f"vocabulary={len(self._idf_scores)}"
        )

    @property
    def total_documents(self) -> int:
        return self._total_documents

    @property
    def vocabulary_size(self) -> int:
        return len(self._idf_scores)

    def calculate_tfidf_score(self, query_words: Iterable[str], document_text: str) -> float:
        """
        Score a document against query tokens.

        Sums tf * idf over the query tokens and divides by the sum of their
        IDFs (the score every token would reach with tf = 1).

        Args:
            query_words: Normalized query tokens
            document_text: Text to score (agent document text)

        Returns:
            Normalized TF-IDF score, 0.0 for an empty query, a blank
            document or a zero denominator
        """
        query_words = set(query_words)
        if not query_words or not document_text or not document_text.strip():
            return 0.0

        document_words = split_words(document_text.lower())
        if not document_words:
            return 0.0

        total_score = 0.0
        max_possible_score = 0.0

        for word in query_words:
            word = word.lower()
            term_count = sum(1 for w in document_words if w == word)
            tf = term_count / len(document_words)
            idf = self._idf_scores.get(word, 0.0)

            total_score += tf * idf
            max_possible_score += idf

        if max_possible_score == 0:
            return 0.0

        return total_score / max_possible_score

    def get_idf_score(self, word: str) -> float:
        """Get IDF for a word (0.0 if unseen)"""
        return self._idf_scores.get(word.lower(), 0.0)

    def _calculate_idf(self, agents: List[AgentProfile]) -> Dict[str, float]:
        if not agents:
            return {}

        document_frequency: Dict[str, int] = {}
        for agent in agents:
            for word in set(split_words(agent.document_text.lower())):
                document_frequency[word] = document_frequency.get(word, 0) + 1

        return {
            word: math.log(self._total_documents / (doc_count + 1))
            for word, doc_count in document_frequency.items()
        }
