import re
from typing import List, NamedTuple

from plagcheck.config import MAX_SENTENCES, MIN_SENTENCE_LENGTH, MIN_TOKEN_LENGTH

# Indonesian + English. Shared read-only across worker threads.
STOP_WORDS = frozenset([
    "yang", "di", "dan", "itu", "dengan", "untuk", "tidak", "ini", "dari",
    "dalam", "akan", "pada", "juga", "saya", "ke", "karena", "ia", "ada",
    "mereka", "kita", "kamu", "dia", "atau", "saat", "oleh", "sudah", "bisa",
    "kami", "adalah", "sebagai", "jika", "namun", "maka", "tentang", "seperti",
    "serta", "bagi", "hal", "pun", "agar", "setelah", "belum", "bukan",

    "the", "be", "to", "of", "and", "a", "in", "that", "have", "i", "it",
    "for", "not", "on", "with", "he", "as", "you", "do", "at", "this", "but",
    "his", "by", "from", "they", "we", "say", "her", "she", "or", "an", "will",
    "my", "one", "all", "would", "there", "their", "what", "so", "up", "out",
    "if", "about", "who", "get", "which", "go", "me", "when", "make", "can",
    "like", "time", "no", "just", "him", "know", "take", "people", "into",
    "year", "your", "good", "some", "could", "them", "see", "other", "than",
    "then", "now", "look", "only", "come", "its", "over", "think", "also",
])

# Unicode \w: accented letters stay part of a token
_NON_WORD_RE = re.compile(r"[^\w\s]")
_SENTENCE_END_RE = re.compile(r"[.!?]+")


class Sentence(NamedTuple):
    index: int
    text: str


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation and drop short tokens and stop words."""
    cleaned = _NON_WORD_RE.sub("", (text or "").lower())
    return [
        tok for tok in cleaned.split()
        if len(tok) >= MIN_TOKEN_LENGTH and tok not in STOP_WORDS
    ]


def split_sentences(
    text: str,
    min_length: int = MIN_SENTENCE_LENGTH,
    max_sentences: int = MAX_SENTENCES,
) -> List[Sentence]:
    """
    Split text on runs of sentence-terminal punctuation.

    Pieces of `min_length` characters or fewer are dropped and at most
    `max_sentences` are kept, in document order.
    """
    pieces = (p.strip() for p in _SENTENCE_END_RE.split(text or ""))
    kept = [p for p in pieces if len(p) > min_length][:max_sentences]
    return [Sentence(i, p) for i, p in enumerate(kept)]
