"""
Annular fit diagnostics: MARE across random starts and cumulative fit vs data.

Fits a bundled simulation set (default: rayleigh, pressure dependent) and
writes a two-panel figure next to this script:
  left  - sorted MARE of every optimizer start (convergence stability)
  right - normalized cumulative PSF of each run (points) and the fitted
          model at the run's pressure (lines)

No unicode (Windows charmap).
Run from repo root with PYTHONPATH=. (e.g. python scripts/plot_annular_fit.py rayleigh)
"""

import os
import sys

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(SCRIPT_DIR)
sys.path.insert(0, REPO_ROOT)

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from apsf.fit import fit_annular
from apsf.histogram import Histogram, cumulative_integral
from apsf.predict import predict_annular
from data.simulations import get_simulation_by_id


def main(simulation_id="rayleigh", nstart=30, seed=1):
    sim = get_simulation_by_id(simulation_id)
    if sim is None:
        raise RuntimeError("Unknown simulation set: %s" % simulation_id)

    hists = [Histogram.from_dict(h) for h in sim["histograms"]]
    fit = fit_annular(hists, press=sim["press_dep"], norm=True,
                      nstart=nstart, seed=seed)
    print(fit)
    for w in fit.warnings:
        print("warning: %s" % w)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4.5))

    ax1.plot(np.arange(1, len(fit.mare_seq) + 1), fit.mare_seq, "o-", ms=3)
    ax1.set_xlabel("Start (sorted)")
    ax1.set_ylabel("MARE")
    ax1.set_yscale("log")
    ax1.grid(True, alpha=0.2)

    cols = plt.cm.viridis(np.linspace(0.0, 0.8, len(hists)))
    for hist, col in zip(hists, cols):
        r = hist.bin_brks
        press = hist.pressure if fit.press_dep else None
        ax2.plot(r, cumulative_integral(hist, norm=True), "o", ms=2.5,
                 color="0.6")
        label = "%.0f mbar" % press if press is not None else "fit"
        ax2.plot(r, predict_annular(r, fit, kind="cumulative", press=press),
                 "-", color=col, lw=1.4, label=label)
    ax2.set_xlim(0, float(hists[0].bin_brks[-1]))
    ax2.set_ylim(0, 1.05)
    ax2.set_xlabel("Radius (km)")
    ax2.set_ylabel("Normalized F(r)")
    ax2.legend(loc="lower right")
    ax2.grid(True, alpha=0.2)

    plt.tight_layout()
    out_path = os.path.join(SCRIPT_DIR, "annular_fit_%s.png" % simulation_id)
    plt.savefig(out_path, dpi=200)
    plt.close()
    print("Saved: %s" % out_path)


if __name__ == "__main__":
    main(*sys.argv[1:2])
