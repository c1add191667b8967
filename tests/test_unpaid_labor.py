from nuacha.data.unpaid_labor import (
    FAMILY_TYPES,
    UNPAID_LABOR_CATEGORIES,
    get_unpaid_labor_for_family_type,
    get_total_unpaid_labor_value,
)

def test_filter_by_family_type():
    for family_type in FAMILY_TYPES:
        categories = get_unpaid_labor_for_family_type(family_type)
        assert categories
        assert all(family_type in category.family_types for category in categories)

def test_total_is_sum_of_filtered_defaults():
    categories = get_unpaid_labor_for_family_type("single-mother")
    assert get_total_unpaid_labor_value("single-mother") == sum(c.default_value for c in categories)

def test_unknown_family_type():
    assert get_unpaid_labor_for_family_type("unknown") == []
    assert get_total_unpaid_labor_value("unknown") == 0

def test_category_ids_are_unique():
    ids = [category.id for category in UNPAID_LABOR_CATEGORIES]
    assert len(ids) == len(set(ids))
