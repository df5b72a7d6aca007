import pytest

from alexagent.scoring import (
    RelevanceThreshold,
    calculate_hybrid_score,
    calculate_quality,
    classify_relevance,
    tfidf_score,
)


def test_quality_of_empty_content_is_zero():
    metrics = calculate_quality("", 3)
    assert metrics.final_score == 0.0
    assert metrics.context_count == 3


def test_quality_structure_detects_task_and_input():
    content = "Task: review the code\nInput: some code to review in detail here"
    metrics = calculate_quality(content, 0)
    assert metrics.has_task_input is True
    assert metrics.structure_score == 1.0
    assert metrics.content_length == len(content)


def test_quality_is_capped_at_one():
    content = "Task: review the code\nInput: some code to review in detail here"
    assert calculate_quality(content, 10).final_score == 1.0
    assert calculate_quality(content, 10).completeness_score == pytest.approx(1.0)


def test_quality_grows_with_context_count():
    content = "Task: short"
    scores = [calculate_quality(content, n).final_score for n in range(6)]
    assert scores == sorted(scores)
    assert scores[0] < scores[-1]


def test_quality_counts_bytes():
    content = "代码审查"
    assert calculate_quality(content, 0).content_length == len(content.encode("utf-8"))


def test_hybrid_score_weights():
    assert calculate_hybrid_score(1.0, 0.0, 0.0).final_score == pytest.approx(0.4)
    assert calculate_hybrid_score(0.0, 0.0, 1.0).final_score == pytest.approx(0.2)


def test_hybrid_score_explanation():
    assert calculate_hybrid_score(0.0, 0.0, 0.0).explanation == "Hybrid scoring: "
    full = calculate_hybrid_score(0.5, 0.5, 0.5).explanation
    assert "keyword match" in full
    assert "semantic similarity" in full
    assert "text overlap" in full


def test_tfidf_zero_inputs():
    assert tfidf_score(0, 1, 10) == 0.0
    assert tfidf_score(1, 0, 10) == 0.0
    assert tfidf_score(1, 1, 0) == 0.0


def test_tfidf_term_in_every_document_scores_zero():
    assert tfidf_score(3, 2, 2) == 0.0


def test_tfidf_rarer_terms_score_higher():
    assert tfidf_score(1, 1, 10) > tfidf_score(1, 5, 10)
    assert tfidf_score(2, 1, 10) == pytest.approx(2 * tfidf_score(1, 1, 10))


@pytest.mark.parametrize(
    "score, label",
    [(0.7, "excellent"), (0.3, "high"), (0.05, "moderate"), (0.01, "low")],
)
def test_classify_relevance_default(score, label):
    assert classify_relevance(score, None) == label


def test_classify_relevance_custom_threshold():
    threshold = RelevanceThreshold(min_score=0.5, high_score=0.6, excellent_score=0.9)
    assert classify_relevance(0.3, threshold) == "low"
    assert classify_relevance(0.95, threshold) == "excellent"