"""
Tests for cross-graph topic ranking (src/graph/related_topics.py).
"""

import pytest

from src.graph.related_topics import (
    CandidateTopic,
    InvalidInputError,
    RelatedTopicsResult,
    TopicRef,
    aggregate_candidates,
    build_reason,
    rank_related_topics,
)


def candidates_from(titles, start_id=1, graph_id=2):
    return [
        CandidateTopic(id=start_id + i, graph_id=graph_id, title=title)
        for i, title in enumerate(titles)
    ]


@pytest.fixture
def ai_target():
    return TopicRef(id=100, title="AI")


def test_aggregates_case_and_space_variants(ai_target):
    candidates = [
        CandidateTopic(id=1, graph_id=2, title="ai"),
        CandidateTopic(id=2, graph_id=3, title="AI "),
        CandidateTopic(id=3, graph_id=4, title="Artificial"),
    ]

    result = rank_related_topics(ai_target, candidates)

    assert result.topic == ai_target
    assert len(result.related) == 2

    first, second = result.related
    assert first.id == 1
    assert first.title == "ai"
    assert first.occurrences == 2
    assert first.similarity == 1.0
    assert first.score == 2.0
    assert first.reason == "identical match found in 2 other graph(s)"

    assert second.id == 3
    assert second.occurrences == 1
    assert second.similarity == pytest.approx(0.1)
    assert second.score == pytest.approx(0.1)
    assert second.reason == "partial match; best similarity=0.10 found in 1 other graph(s)"


def test_representative_is_first_seen():
    target = TopicRef(id=1, title="spider man")
    candidates = [
        CandidateTopic(id=5, graph_id=2, title="Spider Man"),
        CandidateTopic(id=9, graph_id=3, title="spider   MAN"),
    ]

    result = rank_related_topics(target, candidates)

    assert len(result.related) == 1
    row = result.related[0]
    assert (row.id, row.title, row.occurrences) == (5, "Spider Man", 2)


def test_zero_similarity_candidates_are_dropped():
    target = TopicRef(id=1, title="xyz")
    result = rank_related_topics(target, candidates_from(["abc", "", "   "]))
    assert result.related == []


def test_empty_candidate_pool_gives_empty_result(ai_target):
    result = rank_related_topics(ai_target, [])
    assert isinstance(result, RelatedTopicsResult)
    assert result.related == []


def test_min_similarity_threshold(ai_target):
    candidates = candidates_from(["ai", "Artificial"])
    result = rank_related_topics(ai_target, candidates, min_similarity=0.5)
    assert [row.title for row in result.related] == ["ai"]


def test_sorted_by_score_then_similarity():
    target = TopicRef(id=1, title="abcd")
    # Two half matches (score 1.0, similarity 0.5) listed before one exact match
    # (score 1.0, similarity 1.0)
    candidates = candidates_from(["abcdefgh", "ABCDEFGH", "abcd", "abcdef"])

    result = rank_related_topics(target, candidates)

    assert [row.title for row in result.related] == ["abcd", "abcdefgh", "abcdef"]
    assert [row.score for row in result.related] == [1.0, 1.0, pytest.approx(0.6667)]


def test_exact_ties_keep_first_appearance_order():
    target = TopicRef(id=1, title="spider")
    candidates = [
        CandidateTopic(id=10, graph_id=2, title="spidery"),
        CandidateTopic(id=3, graph_id=3, title="spiderx"),
        CandidateTopic(id=7, graph_id=4, title="spiderz"),
    ]

    result = rank_related_topics(target, candidates)

    assert [row.id for row in result.related] == [10, 3, 7]
    assert len({row.score for row in result.related}) == 1


def test_truncates_to_twenty_best():
    target = TopicRef(id=1, title="topic")
    titles = [f"topic{i}" for i in range(30)]
    candidates = candidates_from(titles)

    result = rank_related_topics(target, candidates)

    assert len(result.related) == 20
    # topic0..topic9 score 5/6, the rest 5/7 in input order
    assert [row.title for row in result.related] == [f"topic{i}" for i in range(20)]
    assert result.related[0].score == pytest.approx(0.8333)
    assert result.related[-1].score == pytest.approx(0.7143)


def test_custom_max_results(ai_target):
    candidates = candidates_from(["ai", "Artificial"])
    assert len(rank_related_topics(ai_target, candidates, max_results=1).related) == 1
    assert rank_related_topics(ai_target, candidates, max_results=0).related == []


def test_idempotent(ai_target):
    candidates = candidates_from(["ai", "AI ", "Artificial", "aim", "air", "Ai lab"])
    first = rank_related_topics(ai_target, candidates)
    second = rank_related_topics(ai_target, candidates)
    assert first == second


def test_values_are_rounded_to_four_decimals():
    target = TopicRef(id=1, title="cat")
    candidates = candidates_from(["catalog", "Catalog ", "CATALOG"])

    row = rank_related_topics(target, candidates).related[0]

    assert row.similarity == 0.4286
    assert row.score == 1.2857
    assert row.reason == "partial match; best similarity=0.43 found in 3 other graph(s)"


def test_score_is_bounded_by_similarity_times_occurrences():
    target = TopicRef(id=1, title="data science")
    candidates = candidates_from(["database", "Data Science", "data", "science fiction"])
    for row in rank_related_topics(target, candidates).related:
        assert 0.0 <= row.similarity <= 1.0
        assert row.score <= row.similarity * row.occurrences + 1e-4


def test_to_dict_shape(ai_target):
    payload = rank_related_topics(ai_target, candidates_from(["ai"])).to_dict()
    assert payload == {
        "topic": {"id": 100, "title": "AI"},
        "related": [
            {
                "id": 1,
                "title": "ai",
                "occurrences": 1,
                "similarity": 1.0,
                "score": 1.0,
                "reason": "identical match found in 1 other graph(s)",
            }
        ],
    }


def test_aggregate_candidates_preserves_insertion_order():
    aggregates = aggregate_candidates("spider", candidates_from(["Spider Man", "spiders", "spider man"]))
    assert list(aggregates) == ["spider man", "spiders"]
    assert aggregates["spider man"].occurrences == 2
    assert aggregates["spider man"].title == "Spider Man"


def test_build_reason():
    assert build_reason(1.0, 3) == "identical match found in 3 other graph(s)"
    assert build_reason(0.123, 1) == "partial match; best similarity=0.12 found in 1 other graph(s)"


@pytest.mark.parametrize(
    "target, candidates",
    [
        (None, []),
        (TopicRef(id=1, title=None), []),
        (TopicRef(id=1, title="AI"), None),
        (TopicRef(id=1, title="AI"), [CandidateTopic(id=2, graph_id=2, title=None)]),
    ],
)
def test_invalid_input_raises(target, candidates):
    with pytest.raises(InvalidInputError):
        rank_related_topics(target, candidates)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        rank_related_topics(TopicRef(id=1, title="AI"), None)


def test_negative_max_results_rejected(ai_target):
    with pytest.raises(InvalidInputError):
        rank_related_topics(ai_target, [], max_results=-1)
