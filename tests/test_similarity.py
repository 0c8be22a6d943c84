"""
Tests for the topic similarity metric (src/graph/similarity.py).
"""

import pytest

from src.graph.similarity import common_prefix_length, similarity_score

SAMPLE_TITLES = [
    "AI",
    "Artificial Intelligence",
    "spider",
    "Spider Man",
    "cat",
    "catalog",
    "data science",
    "Database",
    "x",
    "   padded   ",
]


@pytest.mark.parametrize("title", [t for t in SAMPLE_TITLES if t.strip()])
def test_reflexive(title):
    assert similarity_score(title, title) == 1.0


@pytest.mark.parametrize("a", SAMPLE_TITLES)
@pytest.mark.parametrize("b", SAMPLE_TITLES)
def test_symmetric_and_bounded(a, b):
    forward = similarity_score(a, b)
    assert forward == similarity_score(b, a)
    assert 0.0 <= forward <= 1.0


@pytest.mark.parametrize("other", ["", "   ", "topic"])
def test_empty_input_scores_zero(other):
    assert similarity_score("", other) == 0.0
    assert similarity_score(other, "") == 0.0


def test_whitespace_only_is_empty():
    assert similarity_score(" \t ", "topic") == 0.0


def test_identical_after_case_and_space_normalization():
    assert similarity_score("Spider Man", "spiderman") == 1.0
    assert similarity_score("AI", "ai ") == 1.0


def test_containment_uses_longer_length_as_denominator():
    # "spider" inside "spiderman" (9 characters once compacted)
    assert similarity_score("spider", "spider man") == pytest.approx(6 / 9)


def test_containment_checked_before_prefix():
    assert similarity_score("cat", "catalog") == pytest.approx(3 / 7)
    assert round(similarity_score("cat", "catalog"), 4) == pytest.approx(0.4286)


def test_containment_in_the_middle():
    assert similarity_score("man", "spider man") == pytest.approx(3 / 9)


def test_prefix_fallback():
    # "database" is not inside "datascience"; shared prefix is "data"
    assert similarity_score("data science", "database") == pytest.approx(4 / 11)
    assert round(similarity_score("data science", "database"), 4) == pytest.approx(0.3636)


def test_equal_length_prefix():
    assert similarity_score("abc", "abd") == pytest.approx(2 / 3)


def test_no_shared_prefix_or_containment():
    assert similarity_score("xyz", "abc") == 0.0
    assert similarity_score("AI", "Artificial") == pytest.approx(1 / 10)


def test_common_prefix_length():
    assert common_prefix_length("database", "datascience") == 4
    assert common_prefix_length("", "abc") == 0
    assert common_prefix_length("abc", "abc") == 3
