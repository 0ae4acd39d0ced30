"""Calibration curve plotting."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from pwlcal.calibration.calibrator import Calibrator


def plot_calibration(
    calibrator: Calibrator,
    out_path: str | Path,
    margin_frac: float = 0.1,
    n_samples: int = 200,
    title: str | None = None,
) -> Path:
    """Plot the knots and the fitted curve, widened past both ends of the table."""

    if not calibrator.fitted:
        raise ValueError("Calibrator must be fitted before plotting; call begin() first")

    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    segments = calibrator.segments
    lo, hi = segments[0].raw_lo, segments[-1].raw_hi
    pad = (hi - lo) * float(margin_frac)
    x = np.linspace(lo - pad, hi + pad, int(n_samples))
    y = calibrator.calibrate_many(x)
    knots_x = np.array([segments[0].raw_lo] + [seg.raw_hi for seg in segments])
    knots_y = calibrator.calibrate_many(knots_x)

    mode = "clamped" if calibrator.limit_output_to_calibration_range else "extrapolated"
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(x, y, linewidth=1.5, label=f"calibration ({mode})")
    ax.plot(knots_x, knots_y, linestyle="none", marker="o", color="black", label="knots")
    ax.axvspan(lo, hi, color="grey", alpha=0.1, label="table range")

    ax.set_xlabel("raw")
    ax.set_ylabel("calibrated")
    ax.set_title(title or f"Piecewise-linear calibration ({len(segments)} segments)")
    ax.grid(alpha=0.3)
    ax.legend(loc="best")
    fig.tight_layout()
    fig.savefig(p, dpi=140)
    plt.close(fig)
    return p
