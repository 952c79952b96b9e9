"""
End-to-end tests for fit_annular().

Verifies:
  1. Uniform 10-bin histogram: c1 = 1, small MARE, cumulative(10) near 1,
     psf over 5 annuli sums to the total weight.
  2. Histogram-count policy: single histogram under pressure mode warns,
     several histograms without pressure mode fit the first only.
  3. Pressure mode: geometry mismatch is fatal, pressure range recorded.
  4. Restart trace, reproducibility and minimizer injection.
"""

from types import SimpleNamespace

import numpy as np
import pytest

from apsf.constants import FIRST_START
from apsf.engine import FitConfig
from apsf.errors import ConfigurationError, MissingParameterError
from apsf.fit import FIRST_ONLY_WARNING, SINGLE_HISTOGRAM_WARNING, fit_annular
from apsf.histogram import Histogram
from apsf.model import COEFFICIENT_NAMES
from apsf.predict import predict_annular, predict_annular_traced
from data.simulations import get_simulation_by_id


def _start_point_minimizer(fun, x0, args, maxit):
    return SimpleNamespace(x=np.array(x0), fun=fun(x0, *args), status=0)


def _ramp(scale, metadata):
    brks = np.arange(0.0, 11.0)
    return Histogram(brks, brks[:-1] + 0.5, np.full(10, scale), metadata)


@pytest.fixture(scope="module")
def uniform_fit():
    brks = np.arange(0.0, 11.0)
    hist = Histogram(brks, brks[:-1] + 0.5, np.full(10, 0.1), {"press": 1013.25})
    return fit_annular([hist], press=False, norm=True, nstart=5, seed=11)


# -----------------------------------------------------------------------
# Uniform histogram scenario
# -----------------------------------------------------------------------
class TestUniformHistogram:

    def test_total_transmittance(self, uniform_fit):
        assert uniform_fit.coefficients["c1"] == pytest.approx(1.0)

    def test_mare_small(self, uniform_fit):
        assert uniform_fit.mare < 0.05

    def test_record(self, uniform_fit):
        assert uniform_fit.type == "annular"
        assert list(uniform_fit.coefficients) == list(COEFFICIENT_NAMES)
        assert uniform_fit.press_dep is False
        assert uniform_fit.press_rng == (1013.25, 1013.25)
        assert uniform_fit.warnings == ()
        assert np.isfinite(uniform_fit.rmse)

    def test_cumulative_at_edge(self, uniform_fit):
        val = predict_annular([10.0], uniform_fit, kind="cumulative")
        assert val[0] == pytest.approx(1.0, abs=0.05)

    def test_psf_sums_to_total(self, uniform_fit):
        psf = predict_annular([0, 2, 4, 6, 8, 10], uniform_fit, kind="psf")
        assert len(psf) == 5
        assert np.sum(psf) == pytest.approx(1.0, abs=0.1)

    def test_mare_trace(self, uniform_fit):
        seq = uniform_fit.mare_seq
        assert len(seq) == 6
        assert list(seq) == sorted(seq, reverse=True)
        assert uniform_fit.mare == seq[-1]

    def test_dict_input(self, uniform_histogram):
        fit = fit_annular(uniform_histogram.to_dict(), nstart=0)
        assert fit.coefficients["c1"] == pytest.approx(1.0)


# -----------------------------------------------------------------------
# Histogram-count policy
# -----------------------------------------------------------------------
class TestHistogramPolicy:

    def test_single_histogram_pressure_mode_warns(self, uniform_histogram):
        fit = fit_annular([uniform_histogram], press=True, nstart=1, seed=0)
        assert fit.warnings == (SINGLE_HISTOGRAM_WARNING,)
        assert fit.press_dep is True
        assert fit.press_rng == (1013.25, 1013.25)

    def test_first_only_without_pressure(self, make_metadata):
        first = _ramp(0.1, make_metadata())
        other = _ramp(0.3, make_metadata(press=800.0, snsfov=5.0))
        fit = fit_annular([first, other], press=False, nstart=1, seed=4)
        alone = fit_annular([first], press=False, nstart=1, seed=4)
        assert fit.warnings == (FIRST_ONLY_WARNING.format(2),)
        assert dict(fit.coefficients) == dict(alone.coefficients)

    def test_caller_histogram_not_modified(self, make_metadata):
        hist = _ramp(2.0, make_metadata())
        fit_annular([hist], norm=True, nstart=0)
        assert np.array_equal(hist.bin_phtw, np.full(10, 2.0))

    def test_unnormalized_keeps_total(self, make_metadata):
        fit = fit_annular([_ramp(0.05, make_metadata())], norm=False, nstart=0)
        assert fit.coefficients["c1"] == pytest.approx(0.5)

    def test_empty_input(self):
        with pytest.raises(ValueError):
            fit_annular([])


# -----------------------------------------------------------------------
# Pressure mode
# -----------------------------------------------------------------------
class TestPressureMode:

    def test_fov_mismatch_is_fatal(self, make_metadata):
        a = _ramp(0.1, make_metadata(press=1013.25))
        b = _ramp(0.1, make_metadata(press=800.0, snsfov=10.0))
        with pytest.raises(ConfigurationError, match="snsfov"):
            fit_annular([a, b], press=True, nstart=0)

    def test_missing_pressure(self, make_metadata):
        meta = make_metadata()
        del meta["press"]
        a = _ramp(0.1, meta)
        b = _ramp(0.1, dict(meta))
        with pytest.raises(MissingParameterError):
            fit_annular([a, b], press=True, nstart=0)

    def test_normalization_forced(self, make_metadata):
        a = _ramp(0.05, make_metadata(press=1013.25))
        b = _ramp(0.07, make_metadata(press=800.0))
        fit = fit_annular([a, b], press=True, norm=False, nstart=0)
        assert fit.coefficients["c1"] == pytest.approx(1.0)

    def test_rayleigh_set(self):
        sim = get_simulation_by_id("rayleigh")
        fit = fit_annular(sim["histograms"], press=True, nstart=2, seed=2)
        assert fit.press_dep is True
        assert fit.press_rng == (700.0, 1013.25)
        assert fit.warnings == ()
        assert np.isfinite(fit.mare)
        for h in sim["histograms"]:
            pred = predict_annular_traced(h["bin_brks"], fit, kind="cumulative",
                                          press=h["metadata"]["press"])
            assert pred.warnings == []
            assert pred.values[0] == pytest.approx(0.0, abs=1e-12)
            assert np.all(np.isfinite(pred.values))

    def test_rayleigh_extrapolation_flagged(self):
        sim = get_simulation_by_id("rayleigh")
        fit = fit_annular(sim["histograms"], press=True, nstart=0)
        pred = predict_annular_traced([1.0, 2.0], fit, kind="cumulative", press=600.0)
        assert len(pred.warnings) == 1


# -----------------------------------------------------------------------
# Optimizer plumbing
# -----------------------------------------------------------------------
class TestRestarts:

    def test_seed_reproducible(self, uniform_histogram):
        a = fit_annular([uniform_histogram], nstart=2, seed=3)
        b = fit_annular([uniform_histogram], nstart=2, seed=3)
        assert dict(a.coefficients) == dict(b.coefficients)
        assert a.mare_seq == b.mare_seq

    def test_injected_minimizer(self, uniform_histogram):
        fit = fit_annular([uniform_histogram], nstart=0,
                          minimizer=_start_point_minimizer)
        raw = [fit.coefficients[k] for k in COEFFICIENT_NAMES[1:]]
        assert raw == pytest.approx(list(FIRST_START))
        assert fit.convergence == 0
        assert fit.nstart == 0

    def test_config_overrides_keywords(self, uniform_histogram):
        fit = fit_annular([uniform_histogram], nstart=50,
                          config=FitConfig(nstart=1, seed=0))
        assert fit.nstart == 1
        assert len(fit.mare_seq) == 2
