import pytest

from handlers.binding_count import BindingCountCalculator
from lib.errors import CatalogUnavailable


def test_weighted_sum(fakes):
    calc = BindingCountCalculator(fakes.catalog({"roles/viewer": 5, "roles/editor": 10}))
    assert calc.compute({"roles/viewer": 2, "roles/editor": 3}) == 40


def test_empty_map_is_zero(fakes):
    assert BindingCountCalculator(fakes.catalog({"roles/viewer": 5})).compute({}) == 0


def test_unknown_role_contributes_nothing(fakes):
    calc = BindingCountCalculator(fakes.catalog({"roles/viewer": 5}))
    assert calc.compute({"roles/viewer": 1, "projects/p/roles/custom": 7}) == 5


def test_order_does_not_matter(fakes):
    calc = BindingCountCalculator(fakes.catalog({"roles/a": 3, "roles/b": 7, "roles/c": 11}))
    forward = {"roles/a": 1, "roles/b": 2, "roles/c": 3}
    backward = dict(reversed(list(forward.items())))
    assert calc.compute(forward) == calc.compute(backward) == 50


def test_one_catalog_request_per_call(fakes):
    catalog = fakes.catalog({"roles/a": 1, "roles/b": 2})
    calc = BindingCountCalculator(catalog)
    calc.compute({"roles/a": 1, "roles/b": 1, "roles/x": 4})
    assert catalog.calls == 1
    calc.compute({"roles/a": 2})
    assert catalog.calls == 2


def test_catalog_unreachable(fakes):
    calc = BindingCountCalculator(fakes.catalog({}, reachable=False))
    with pytest.raises(CatalogUnavailable):
        calc.compute({"roles/viewer": 1})
