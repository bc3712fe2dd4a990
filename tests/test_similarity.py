import pytest

from hansard_pipeline.utils import name_similarity


def test_identical_names_score_one() -> None:
    assert name_similarity("jane doe", "jane doe") == 1.0


def test_two_empty_strings_score_one() -> None:
    assert name_similarity("", "") == 1.0


def test_empty_against_non_empty_scores_zero() -> None:
    assert name_similarity("", "abc") == 0.0


@pytest.mark.parametrize("a, b", [("kitten", "sitting"), ("jane doe", "dame jane doe"), ("x", "")])
def test_symmetric(a, b) -> None:
    assert name_similarity(a, b) == name_similarity(b, a)


def test_normalized_by_longest_name() -> None:
    assert name_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)
