"""
Simulation histograms: normalization, consistency checks, cumulative integrals.

A Histogram is the annular output of one backward Monte-Carlo run: radius
bin edges, bin midpoints, the photon weight collected in each bin, and the
run metadata (surface pressure, extinction, sensor geometry, resolution).

The fitting engine borrows histograms read-only. Normalization always
returns a new Histogram; the caller's record is never modified.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import numpy as np

from apsf.constants import CONSISTENCY_KEYS, PRESSURE_KEY, REF_PRESSURE_MBAR
from apsf.errors import ConfigurationError, MissingParameterError


class Histogram:
    """
    Annular photon-weight histogram of one simulation run.

    Parameters
    ----------
    bin_brks : sequence of float
        Radius bin edges (km), length n+1, strictly increasing from 0.
    bin_mid : sequence of float
        Radius bin midpoints (km), length n.
    bin_phtw : sequence of float
        Photon weight collected in each bin, length n.
    metadata : dict, optional
        Run parameters. Keys used by the engine: 'press' (mbar), 'res',
        'ext', 'snsznt', 'snsfov', 'snspos'.

    Raises
    ------
    ValueError
        If the sequences have inconsistent lengths or the edges are not
        strictly increasing from 0.
    """

    def __init__(self, bin_brks, bin_mid, bin_phtw, metadata=None):
        self.bin_brks = np.asarray(bin_brks, dtype=float)
        self.bin_mid = np.asarray(bin_mid, dtype=float)
        self.bin_phtw = np.asarray(bin_phtw, dtype=float)
        self.metadata = dict(metadata) if metadata else {}
        self._check()

    def _check(self):
        n = len(self.bin_phtw)
        if n == 0:
            raise ValueError("histogram must have at least one bin")
        if self.bin_brks.ndim != 1 or self.bin_mid.ndim != 1 or self.bin_phtw.ndim != 1:
            raise ValueError("histogram sequences must be one-dimensional")
        if len(self.bin_brks) != n + 1:
            raise ValueError(
                "bin_brks must have {} edges for {} bins, got {}".format(
                    n + 1, n, len(self.bin_brks)))
        if len(self.bin_mid) != n:
            raise ValueError(
                "bin_mid must have {} midpoints, got {}".format(n, len(self.bin_mid)))
        if self.bin_brks[0] != 0:
            raise ValueError("bin_brks must start at 0")
        if np.any(np.diff(self.bin_brks) <= 0):
            raise ValueError("bin_brks must be strictly increasing")

    def __len__(self):
        return len(self.bin_phtw)

    @property
    def pressure(self):
        """Surface pressure of the run in mbar, or None if not recorded."""
        press = self.metadata.get(PRESSURE_KEY)
        return None if press is None else float(press)

    def copy(self, bin_phtw=None):
        """Return an independent copy, optionally with new bin weights."""
        return Histogram(
            self.bin_brks.copy(),
            self.bin_mid.copy(),
            self.bin_phtw.copy() if bin_phtw is None else bin_phtw,
            dict(self.metadata),
        )

    def to_dict(self):
        """Serialize to plain lists (JSON compatible)."""
        return {
            "bin_brks": self.bin_brks.tolist(),
            "bin_mid": self.bin_mid.tolist(),
            "bin_phtw": self.bin_phtw.tolist(),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data):
        """Build a Histogram from the dict shape produced by to_dict()."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValueError("histogram must be a dict")
        for key in ("bin_brks", "bin_mid", "bin_phtw"):
            if key not in data:
                raise ValueError("histogram is missing required field '{}'".format(key))
        try:
            return cls(data["bin_brks"], data["bin_mid"], data["bin_phtw"],
                       data.get("metadata"))
        except (TypeError, ValueError) as e:
            raise ValueError("invalid histogram: {}".format(e))


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

def normalize_histogram(hist):
    """Return a copy of hist whose bin weights sum to 1."""
    total = float(np.sum(hist.bin_phtw))
    if total == 0 or not np.isfinite(total):
        raise ValueError("cannot normalize a histogram with total weight {}".format(total))
    return hist.copy(bin_phtw=hist.bin_phtw / total)


def normalize_histograms(hists, norm=True):
    """
    L1-normalize each histogram independently.

    Returns a new list of copies in either case, so later steps never
    share arrays with the caller.
    """
    if norm:
        return [normalize_histogram(h) for h in hists]
    return [h.copy() for h in hists]


# ---------------------------------------------------------------------------
# Consistency validator
# ---------------------------------------------------------------------------

def _value_kind(arr):
    """numpy dtype kind, with signed and unsigned integers treated alike."""
    kind = arr.dtype.kind
    return "i" if kind == "u" else kind


def _identical(a, b):
    """
    Exact structural equality of two metadata values.

    Shape, value kind (bool, integer, float, string, ...) and every
    element must agree: 1 differs from 1.0 and True differs from 1.
    NaN never equals NaN.
    """
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape or _value_kind(a) != _value_kind(b):
        return False
    return bool(np.array_equal(a, b))


def check_consistency(hists, keys=CONSISTENCY_KEYS):
    """
    Verify that all histograms share the non-pressure run parameters.

    Each histogram after the first is compared to the first on every key
    in `keys`. A pressure-dependent surrogate fitted across differing
    geometries is meaningless, so any mismatch is fatal.

    Raises
    ------
    ConfigurationError
        On the first metadata key that differs.
    """
    if len(hists) < 2:
        return
    ref = hists[0].metadata
    for i, hist in enumerate(hists[1:], start=1):
        for key in keys:
            if not _identical(ref.get(key), hist.metadata.get(key)):
                raise ConfigurationError(
                    "incompatible simulation set for pressure-dependent fit: "
                    "histogram {} differs from histogram 0 in '{}'. All "
                    "simulations in a pressure-dependent fit must share: {}".format(
                        i, key, ", ".join(keys)))


def pressures(hists):
    """Surface pressure of each histogram (mbar); required in pressure mode."""
    out = []
    for i, hist in enumerate(hists):
        press = hist.pressure
        if press is None:
            raise MissingParameterError(
                "histogram {} has no '{}' metadata, required for a "
                "pressure-dependent fit".format(i, PRESSURE_KEY))
        out.append(press)
    return out


# ---------------------------------------------------------------------------
# Cumulative-integral extractor
# ---------------------------------------------------------------------------

def cumulative_integral(hist, norm=False):
    """
    Running radial integral of the histogram at every bin edge.

    The first value (radius 0) is always 0; element i+1 is the total
    weight inside bin_brks[i+1].

    Parameters
    ----------
    hist : Histogram
    norm : bool
        Normalize the result to a total of 1.

    Returns
    -------
    numpy.ndarray
        Length len(hist) + 1.
    """
    w = normalize_histogram(hist).bin_phtw if norm else hist.bin_phtw
    return np.concatenate(([0.0], np.cumsum(w)))


def stack_cumulative(hists, press=False):
    """
    Build the observation vectors for the objective function.

    The singular r = 0 point of every histogram is dropped. With several
    histograms (pressure mode) radii and cumulative values are
    concatenated and the pressure predictor press / 1013.25 is replicated
    once per sample.

    Returns
    -------
    tuple (r, ftot, p)
        r, ftot : numpy.ndarray of equal length.
        p : numpy.ndarray of the same length in pressure mode, else 1.0.
    """
    r = np.concatenate([h.bin_brks[1:] for h in hists])
    ftot = np.concatenate([cumulative_integral(h)[1:] for h in hists])
    if not press:
        return r, ftot, 1.0
    p = np.concatenate([
        np.full(len(h), value / REF_PRESSURE_MBAR)
        for h, value in zip(hists, pressures(hists))
    ])
    return r, ftot, p
