import math
from collections import Counter
from typing import List, NamedTuple, Set, Tuple

from plagcheck.config import NGRAM_SIZE
from plagcheck.utils.text_utils import tokenize


class SimilarityScore(NamedTuple):
    cosine: float
    ngram: float
    combined: float


def _cosine(tokens_a: List[str], tokens_b: List[str]) -> float:
    if not tokens_a or not tokens_b:
        return 0.0
    tf_a, tf_b = Counter(tokens_a), Counter(tokens_b)
    vocab = set(tf_a) | set(tf_b)
    dot = sum(tf_a[w] * tf_b[w] for w in vocab)
    norm_a = math.sqrt(sum(v * v for v in tf_a.values()))
    norm_b = math.sqrt(sum(v * v for v in tf_b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    # float error can push identical vectors a hair past 1
    return min(1.0, dot / (norm_a * norm_b))


def _ngrams(tokens: List[str], n: int) -> Set[Tuple[str, ...]]:
    if len(tokens) < n:
        return set()
    return {tuple(tokens[i:i + n]) for i in range(len(tokens) - n + 1)}


def _ngram_overlap(tokens_a: List[str], tokens_b: List[str], n: int) -> float:
    A, B = _ngrams(tokens_a, n), _ngrams(tokens_b, n)
    if not A or not B:
        return 0.0
    return len(A & B) / max(len(A), len(B))


def cosine_similarity(text_a: str, text_b: str) -> float:
    """Cosine of the term-frequency vectors of two texts, in [0, 1]."""
    return _cosine(tokenize(text_a), tokenize(text_b))


def ngram_similarity(text_a: str, text_b: str, n: int = NGRAM_SIZE) -> float:
    """Share of contiguous n-token windows the two texts have in common."""
    return _ngram_overlap(tokenize(text_a), tokenize(text_b), n)


def combined_similarity(text_a: str, text_b: str, n: int = NGRAM_SIZE) -> SimilarityScore:
    """
    Score a pair with both metrics and keep the stronger signal.

    Cosine catches reworded text that keeps the vocabulary, n-gram overlap
    catches copied phrases inside a long page where the word distribution
    is diluted.
    """
    tokens_a, tokens_b = tokenize(text_a), tokenize(text_b)
    cos = _cosine(tokens_a, tokens_b)
    ng = _ngram_overlap(tokens_a, tokens_b, n)
    return SimilarityScore(cosine=cos, ngram=ng, combined=max(cos, ng))
