from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))
from eventmix import BinningConfig, CategoryDecoder, CategoryEncoder, NO_CATEGORY  # type: ignore


# Column layout of the toy event table
VTX_Z, CENTRALITY, MULTIPLICITY = 0, 1, 2


def parse_args():
    p = argparse.ArgumentParser(description="Categorize toy events for event mixing.")
    p.add_argument("--events", type=int, default=100000, help="Number of toy events")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--save", type=str, default="", help="Write the binning definition to this JSON file")
    p.add_argument("--top", type=int, default=10, help="Number of most populated categories to print")
    return p.parse_args()


def make_events(n_events: int, seed: int) -> np.ndarray:
    """Toy events: gaussian vertex, flat centrality, centrality-dependent multiplicity."""
    rng = np.random.default_rng(seed)
    events = np.empty((n_events, 3))
    events[:, VTX_Z] = rng.normal(0.0, 6.0, n_events)
    events[:, CENTRALITY] = rng.uniform(0.0, 100.0, n_events)
    events[:, MULTIPLICITY] = rng.poisson(2000.0 * np.exp(-events[:, CENTRALITY] / 25.0))
    return events


def main():
    args = parse_args()

    config = BinningConfig(name="toy-mixing")
    config.add_variable(VTX_Z, np.linspace(-10.0, 10.0, 11))
    config.add_variable(CENTRALITY, [0.0, 5.0, 10.0, 20.0, 30.0, 50.0, 70.0, 90.0])
    config.add_variable(MULTIPLICITY, [0.0, 100.0, 500.0, 1000.0, 5000.0])
    if args.save:
        config.save(args.save)
        print(f"[INFO] Binning definition written to {args.save}")

    binning = config.build()
    encoder = CategoryEncoder(binning)
    decoder = CategoryDecoder(binning)

    events = make_events(args.events, args.seed)
    categories = encoder.encode_batch(events)

    accepted = categories != NO_CATEGORY
    print(f"[INFO] {binning}")
    print(f"[INFO] {accepted.sum()} / {len(events)} events categorized "
          f"({100.0 * accepted.mean():.1f}%)")

    counts = np.bincount(categories[accepted], minlength=binning.n_categories)
    print(f"[INFO] {np.count_nonzero(counts)} of {binning.n_categories} categories populated")

    print(f"{'category':>8}  {'events':>7}  {'vtx_z':>14}  {'centrality':>12}  {'multiplicity':>14}")
    for category in np.argsort(counts)[::-1][: args.top]:
        vtx = decoder.bin_edges_of(VTX_Z, int(category))
        cent = decoder.bin_edges_of(CENTRALITY, int(category))
        mult = decoder.bin_edges_of(MULTIPLICITY, int(category))
        print(
            f"{category:>8}  {counts[category]:>7}  "
            f"[{vtx[0]:5.1f},{vtx[1]:5.1f})  [{cent[0]:4.0f},{cent[1]:4.0f})  "
            f"[{mult[0]:5.0f},{mult[1]:5.0f})"
        )


if __name__ == "__main__":
    main()
