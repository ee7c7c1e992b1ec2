import pytest

from sheetflow.services.sheets import column_index, column_letter


@pytest.mark.parametrize("index, letters", [
    (0, "A"),
    (1, "B"),
    (25, "Z"),
    (26, "AA"),
    (27, "AB"),
    (51, "AZ"),
    (52, "BA"),
    (701, "ZZ"),
    (702, "AAA"),
    (16383, "XFD"),
])
def test_column_letter(index, letters):
    assert column_letter(index) == letters
    assert column_index(letters) == index


def test_column_letter_is_injective():
    labels = [column_letter(i) for i in range(20000)]
    assert len(set(labels)) == len(labels)


def test_column_letter_rejects_negative():
    with pytest.raises(ValueError):
        column_letter(-1)


@pytest.mark.parametrize("label", ["", "A1", "-"])
def test_column_index_rejects_bad_labels(label):
    with pytest.raises(ValueError):
        column_index(label)


def test_column_index_ignores_case():
    assert column_index("ab") == 27
