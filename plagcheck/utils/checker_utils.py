"""
Sentence-level plagiarism check: evidence retrieval, scoring, scheduling
and report aggregation.
"""

import math
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from plagcheck.config import (
    BATCH_DELAY,
    BATCH_SIZE,
    MAX_FETCH_WORKERS,
    MAX_URLS_PER_SENTENCE,
    MIN_DOCUMENT_LENGTH,
    PLAGIARISM_THRESHOLD,
    RELEVANCE_THRESHOLD,
    REQUEST_TIMEOUT,
)
from plagcheck.schemas.plagiarism_schemas import (
    PlagiarismReport, SentenceResult, SourceMatch,
)
from plagcheck.utils.similarity_utils import combined_similarity
from plagcheck.utils.text_utils import Sentence, split_sentences
from plagcheck.utils.web_utils import fetch_document, search_web

logger = logging.getLogger("plagcheck.checker")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() would give 2 for 2.5)."""
    return int(math.floor(value + 0.5))


def _to_percent(score: float) -> int:
    return round_half_up(score * 100)


def _score_url(
    sentence: str,
    url: str,
    relevance_threshold: float,
    min_document_length: int,
    timeout: float,
) -> Optional[tuple]:
    """Fetch one candidate and return (url, raw score) when it is relevant."""
    try:
        doc = fetch_document(url, timeout=timeout)
        if doc.length <= min_document_length:
            return None
        score = combined_similarity(sentence, doc.cleaned_text)
        if score.combined > relevance_threshold:
            return url, score.combined
    except Exception as e:
        logger.debug(f"Error scoring {url}: {e}")
    return None


def process_sentence(
    sentence: Sentence,
    max_urls: int = MAX_URLS_PER_SENTENCE,
    fetch_workers: int = MAX_FETCH_WORKERS,
    relevance_threshold: float = RELEVANCE_THRESHOLD,
    plagiarism_threshold: float = PLAGIARISM_THRESHOLD,
    min_document_length: int = MIN_DOCUMENT_LENGTH,
    timeout: float = REQUEST_TIMEOUT,
) -> SentenceResult:
    """
    Search, fetch and score evidence for a single sentence.

    Never raises: any failure yields a result with no evidence.
    """
    logger.info(f"Checking sentence {sentence.index}: '{sentence.text[:30]}...'")
    try:
        urls = search_web(sentence.text)[:max_urls]

        with ThreadPoolExecutor(max_workers=fetch_workers) as ex:
            checks = list(ex.map(
                lambda u: _score_url(
                    sentence.text, u, relevance_threshold, min_document_length, timeout
                ),
                urls,
            ))

        matches = [c for c in checks if c]
        best = max((raw for _, raw in matches), default=0.0)
        sources = sorted(
            (SourceMatch(url=u, similarity=_to_percent(raw)) for u, raw in matches),
            key=lambda m: m.similarity,
            reverse=True,
        )
        return SentenceResult(
            sentence=sentence.text,
            similarity=_to_percent(best),
            sources=sources,
            isPlagiarized=best > plagiarism_threshold,
        )
    except Exception:
        logger.exception(f"Error processing sentence {sentence.index}")
        return SentenceResult(sentence=sentence.text, similarity=0, sources=[], isPlagiarized=False)


def check_sentences(
    sentences: List[Sentence],
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY,
    **sentence_options,
) -> List[SentenceResult]:
    """
    Run `process_sentence` over all sentences, `batch_size` at a time.

    Batches run one after another with `batch_delay` seconds between them
    to stay under the search providers' rate limits. Results keep the
    order of `sentences`.
    """
    results: List[SentenceResult] = []
    with ThreadPoolExecutor(max_workers=batch_size) as ex:
        for start in range(0, len(sentences), batch_size):
            batch = sentences[start:start + batch_size]
            logger.info(f"Processing batch {start // batch_size + 1} ({len(batch)} sentences)")
            futures = [ex.submit(process_sentence, s, **sentence_options) for s in batch]
            results.extend(f.result() for f in futures)

            if start + batch_size < len(sentences):
                time.sleep(batch_delay)
    return results


def aggregate_results(results: List[SentenceResult]) -> PlagiarismReport:
    total = len(results)
    plagiarized = sum(1 for r in results if r.isPlagiarized)
    if total:
        overall = round_half_up(sum(r.similarity for r in results) / total)
        percentage = round_half_up(plagiarized / total * 100)
    else:
        overall = percentage = 0

    return PlagiarismReport(
        overallScore=overall,
        plagiarismPercentage=percentage,
        totalSentences=total,
        plagiarizedSentences=plagiarized,
        results=results,
    )


def run_check(text: str, **options) -> PlagiarismReport:
    """Segment `text`, check every retained sentence and build the report."""
    t0 = time.monotonic()
    sentences = split_sentences(text)
    logger.info(f"Split into {len(sentences)} sentences (text length {len(text)})")

    report = aggregate_results(check_sentences(sentences, **options))

    logger.info(
        f"Plagiarism check complete in {time.monotonic() - t0:.1f}s. "
        f"Overall score: {report.overallScore}, "
        f"plagiarized: {report.plagiarizedSentences}/{report.totalSentences}"
    )
    return report
