"""
Tests for the bundled synthetic simulation sets.
"""

from types import SimpleNamespace

import numpy as np
import pytest

from apsf.fit import fit_annular
from apsf.histogram import Histogram, cumulative_integral
from data.simulations import (
    CONTINENTAL_COEFFICIENTS,
    RAYLEIGH_PRESSURES,
    cumulative_field,
    get_all_simulations,
    get_simulation_by_id,
)


def _start_point_minimizer(fun, x0, args, maxit):
    return SimpleNamespace(x=np.array(x0), fun=fun(x0, *args), status=0)


class TestCatalog:

    def test_ids(self):
        assert [s["id"] for s in get_all_simulations()] == ["continental", "rayleigh"]

    def test_unknown(self):
        assert get_simulation_by_id("nonexistent") is None

    def test_rayleigh_pressures(self):
        sim = get_simulation_by_id("rayleigh")
        assert [h["metadata"]["press"] for h in sim["histograms"]] == list(RAYLEIGH_PRESSURES)

    def test_histograms_are_valid(self):
        for sim in get_all_simulations():
            for h in sim["histograms"]:
                Histogram.from_dict(h)


class TestGeneratingField:

    def test_histogram_bins_the_field(self):
        sim = get_simulation_by_id("continental")
        hist = Histogram.from_dict(sim["histograms"][0])
        expected = cumulative_field(hist.bin_brks, CONTINENTAL_COEFFICIENTS)
        assert np.allclose(cumulative_integral(hist), expected, atol=1e-12)

    def test_truncated_total_below_asymptote(self):
        total = cumulative_field([30.0], CONTINENTAL_COEFFICIENTS)[0]
        assert total < CONTINENTAL_COEFFICIENTS["c1"]

    def test_normalized_fit_does_not_return_generating_c1(self):
        sim = get_simulation_by_id("continental")
        fit = fit_annular(sim["histograms"], norm=True, nstart=0,
                          minimizer=_start_point_minimizer)
        assert fit.coefficients["c1"] == pytest.approx(1.0)
        assert fit.coefficients["c1"] != pytest.approx(CONTINENTAL_COEFFICIENTS["c1"])

    def test_unnormalized_fit_c1_is_truncated_total(self):
        sim = get_simulation_by_id("continental")
        fit = fit_annular(sim["histograms"], norm=False, nstart=0,
                          minimizer=_start_point_minimizer)
        total = cumulative_field([30.0], CONTINENTAL_COEFFICIENTS)[0]
        assert fit.coefficients["c1"] == pytest.approx(total)
