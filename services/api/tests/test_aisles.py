import pytest

from recipebox.services.aisles import AISLE_KEYWORDS, DEFAULT_AISLE, classify


@pytest.mark.parametrize(
    "name, aisle",
    [
        ("Milk", "Dairy"),
        ("Salted Butter", "Dairy"),
        ("Ground Beef", "Meat & Seafood"),
        ("Quinoa", "Grains & Pasta"),
        ("Frozen peas", "Frozen"),
        ("All-purpose flour", "Baking"),
        ("Sourdough bread", "Bakery"),
    ],
)
def test_classify_by_keyword(name, aisle):
    assert classify(name) == aisle


def test_earlier_aisles_win():
    assert classify("coconut milk") == "Canned & Jarred"
    assert classify("Chicken broth") == "Canned & Jarred"
    assert classify("Eggplant") == "Produce"


def test_unknown_and_empty_fall_back_to_pantry():
    assert classify("Unobtainium") == DEFAULT_AISLE
    assert classify("") == DEFAULT_AISLE
    assert classify(None) == DEFAULT_AISLE


def test_keywords_are_lowercase():
    for _, keywords in AISLE_KEYWORDS:
        assert all(kw == kw.lower() for kw in keywords)
