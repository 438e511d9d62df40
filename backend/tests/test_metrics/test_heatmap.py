from collections import Counter

from techub.metrics.heatmap import (
    HEATMAP_COLUMNS,
    NO_INFO_LABEL,
    UNASSIGNED_CATEGORY,
    build_heatmap,
    classify_age,
    heat_tier,
    matches_age_range,
)


def test_age_range_boundaries():
    assert classify_age(0) == "Até 3 dias"
    assert classify_age(3) == "Até 3 dias"
    assert classify_age(4) == "4 a 5 dias"
    assert classify_age(5) == "4 a 5 dias"
    assert classify_age(6) == "6 a 10 dias"
    assert classify_age(30) == "11 a 30 dias"
    assert classify_age(31) == "31 a 50 dias"
    assert classify_age(50) == "31 a 50 dias"
    assert classify_age(51) == "Acima de 50 dias"
    assert classify_age(None) == NO_INFO_LABEL


def test_null_category_lands_in_unassigned_bucket():
    heatmap = build_heatmap([(None, 2), ("", 40), ("N1", 1)])
    assert UNASSIGNED_CATEGORY in heatmap.categories
    assert heatmap.total(UNASSIGNED_CATEGORY) == 2


def test_row_totals_match_raw_counts():
    items = [("N1", 1), ("N1", 4), ("N1", None), ("N2", 60), ("N2", 12), ("N1", 33)]
    heatmap = build_heatmap(items)
    raw = Counter(category for category, _ in items)

    for category in heatmap.categories:
        assert heatmap.total(category) == raw[category]
    assert heatmap.max_value == 1


def test_keeps_the_busiest_categories():
    # 25 categories with distinct totals 1..25
    items = [(f"Fila {n:02d}", 1) for n in range(1, 26) for _ in range(n)]
    heatmap = build_heatmap(items, top_n=20)

    assert len(heatmap.categories) == 20
    assert set(heatmap.categories) == {f"Fila {n:02d}" for n in range(6, 26)}
    assert heatmap.categories[0] == "Fila 25"


def test_dropping_a_non_retained_category_changes_nothing():
    items = [(f"Fila {n:02d}", n % 7) for n in range(1, 26) for _ in range(n)]
    full = build_heatmap(items, top_n=20)
    reduced = build_heatmap([i for i in items if i[0] != "Fila 01"], top_n=20)

    assert reduced.categories == full.categories
    assert reduced.cells == full.cells
    assert reduced.max_value == full.max_value


def test_ties_keep_encounter_order():
    heatmap = build_heatmap([("B", 1), ("A", 1), ("C", 1)])
    assert heatmap.categories == ["B", "A", "C"]


def test_rows_cover_every_column_with_tiers():
    heatmap = build_heatmap([("N1", 1)] * 5 + [("N1", 45)])
    row = heatmap.rows()[0]

    assert [c["range"] for c in row["cells"]] == list(HEATMAP_COLUMNS)
    by_range = {c["range"]: c for c in row["cells"]}
    assert by_range["Até 3 dias"] == {"range": "Até 3 dias", "count": 5, "tier": 5}
    assert by_range["31 a 50 dias"]["tier"] == 2
    assert by_range[NO_INFO_LABEL]["tier"] == 0
    assert row["total"] == 6


def test_heat_tier_scale():
    assert heat_tier(0, 10) == 0
    assert heat_tier(5, 0) == 0
    assert heat_tier(1, 10) == 1
    assert heat_tier(3, 10) == 2
    assert heat_tier(10, 10) == 5


def test_matches_age_range():
    assert matches_age_range(4, "4a5")
    assert not matches_age_range(6, "4a5")
    assert not matches_age_range(None, "acima50")
    assert matches_age_range(None, None)
