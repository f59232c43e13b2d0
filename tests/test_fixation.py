import pytest

from synapse_read.fixation import calculate_fixation, split_word


@pytest.mark.parametrize(
    ("word", "expected"),
    [
        ("hello", 3),
        ("reading", 2),
        ("quickly", 4),
        ("understanding", 3),
        ("information", 3),
        ("the", 1),
        ("in", 1),
    ],
)
def test_calculate_fixation_applies_affix_and_length_rules(word: str, expected: int):
    assert calculate_fixation(word, 0.5) == expected


def test_single_characters_and_empty_words_return_their_length():
    assert calculate_fixation("a", 0.5) == 1
    assert calculate_fixation("", 0.5) == 0


def test_fixation_level_moves_the_base_point():
    assert calculate_fixation("hello", 0.2) == 1
    assert calculate_fixation("hello", 0.8) == 4


def test_fixation_point_stays_inside_the_word():
    words = [
        "at",
        "cat",
        "Smith",
        "rethink",
        "preview",
        "wonderful",
        "internationalization",
        "running",
        "co",
        "ex",
        "underwhelming",
        "hopelessness",
    ]
    levels = [0.2, 0.35, 0.5, 0.65, 0.8]
    for word in words:
        for level in levels:
            point = calculate_fixation(word, level)
            assert 1 <= point <= len(word) - 1, (word, level, point)
            if len(word) <= 3:
                assert point == 1


def test_split_word_partitions_the_word():
    bold, normal = split_word("understanding")
    assert (bold, normal) == ("und", "erstanding")
    assert bold + normal == "understanding"
