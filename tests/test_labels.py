import pytest

from pdfautofill.labels import find_nearest_label, is_meaningful_label
from pdfautofill.models import TextRun


@pytest.mark.parametrize(
    "text",
    ["...", " : ", "....Name", "ab", "Day", "MONTH", "year", "jour", "an"],
)
def test_placeholder_and_date_part_text_is_not_a_label(text):
    assert not is_meaningful_label(text)


@pytest.mark.parametrize("text", ["Name", "Full name:", "Bank account"])
def test_regular_text_is_a_label(text):
    assert is_meaningful_label(text)


def test_picks_closest_run_left_of_field():
    runs = [
        TextRun("Far label", x=0.0, y=100.0),
        TextRun("Near label", x=80.0, y=102.0),
    ]
    assert find_nearest_label(runs, 100.0, 100.0) == "Near label"


def test_rejects_runs_outside_the_band():
    runs = [
        TextRun("Right side", x=120.0, y=100.0),  # dx = -20
        TextRun("Too far left", x=-350.0, y=100.0),  # dx = 450
        TextRun("Way below", x=90.0, y=140.0),  # dy = -40
        TextRun("Way above", x=90.0, y=40.0),  # dy = 60
    ]
    assert find_nearest_label(runs, 100.0, 100.0) is None


def test_band_edges_are_exclusive():
    assert find_nearest_label([TextRun("Edge", x=110.0, y=100.0)], 100.0, 100.0) is None
    assert find_nearest_label([TextRun("Edge", x=100.0, y=50.0)], 100.0, 100.0) is None
    assert find_nearest_label([TextRun("Inside", x=109.0, y=100.0)], 100.0, 100.0) == "Inside"


def test_skips_leader_dots_even_when_closest():
    runs = [
        TextRun("..........", x=99.0, y=100.0),
        TextRun("Address", x=20.0, y=100.0),
    ]
    assert find_nearest_label(runs, 100.0, 100.0) == "Address"


def test_tie_keeps_first_run():
    runs = [
        TextRun("First", x=90.0, y=100.0),
        TextRun("Second", x=100.0, y=90.0),
    ]
    assert find_nearest_label(runs, 100.0, 100.0) == "First"


def test_repeated_calls_give_the_same_label():
    runs = [TextRun(f"Label {i}", x=float(i * 7 % 90), y=float(100 + i % 20)) for i in range(50)]
    results = {find_nearest_label(runs, 120.0, 110.0) for _ in range(10)}
    assert len(results) == 1


def test_no_runs_means_no_label():
    assert find_nearest_label([], 10.0, 10.0) is None
