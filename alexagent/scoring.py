"""Quality and relevance scoring of contexts and search results."""

from __future__ import annotations

import math
from dataclasses import dataclass

INDEX_WEIGHT = 0.4
VECTOR_WEIGHT = 0.4
TEXT_WEIGHT = 0.2


@dataclass
class QualityMetrics:
    """Breakdown of a content quality score."""

    content_length: int = 0
    context_count: int = 0
    has_task_input: bool = False
    structure_score: float = 0.0
    completeness_score: float = 0.0
    final_score: float = 0.0


@dataclass
class ScoreResult:
    """Components and total of a hybrid search score."""

    index_score: float
    vector_score: float
    text_score: float
    final_score: float
    explanation: str


@dataclass
class RelevanceThreshold:
    """Score boundaries for the relevance classes."""

    min_score: float = 0.05
    high_score: float = 0.3
    excellent_score: float = 0.7


def calculate_quality(content: str, context_count: int) -> QualityMetrics:
    """Score built context content by length, structure and context richness."""
    length = len(content.encode("utf-8"))
    metrics = QualityMetrics(content_length=length, context_count=context_count)
    if not content:
        return metrics

    score = 0.5
    if length > 50:
        score += 0.3
    elif length > 20:
        score += 0.15

    has_task = "Task:" in content
    has_input = "Input:" in content
    metrics.has_task_input = has_task and has_input
    if metrics.has_task_input:
        score += 0.2
        metrics.structure_score = 1.0
    elif has_task or has_input:
        score += 0.1
        metrics.structure_score = 0.5

    if context_count > 0:
        context_score = min(0.2 * context_count / 5.0, 0.2)
        score += context_score
        metrics.completeness_score = context_score / 0.2

    metrics.final_score = min(score, 1.0)
    return metrics


def calculate_hybrid_score(
    index_score: float, vector_score: float, text_match_score: float
) -> ScoreResult:
    """Weighted combination of keyword, vector and text-overlap scores."""
    final = (
        index_score * INDEX_WEIGHT
        + vector_score * VECTOR_WEIGHT
        + text_match_score * TEXT_WEIGHT
    )
    explanation = "Hybrid scoring: "
    if index_score > 0:
        explanation += "keyword match "
    if vector_score > 0:
        explanation += "semantic similarity "
    if text_match_score > 0:
        explanation += "text overlap "
    return ScoreResult(
        index_score=index_score,
        vector_score=vector_score,
        text_score=text_match_score,
        final_score=final,
        explanation=explanation,
    )


def tfidf_score(term_freq: int, doc_freq: int, total_docs: int) -> float:
    """Raw term frequency times the log inverse document frequency."""
    if term_freq == 0 or doc_freq == 0 or total_docs == 0:
        return 0.0
    return float(term_freq) * math.log(total_docs / doc_freq)


def classify_relevance(score: float, threshold: RelevanceThreshold | None = None) -> str:
    """Name the relevance class of a score: excellent, high, moderate or low."""
    threshold = threshold or RelevanceThreshold()
    if score >= threshold.excellent_score:
        return "excellent"
    if score >= threshold.high_score:
        return "high"
    if score >= threshold.min_score:
        return "moderate"
    return "low"