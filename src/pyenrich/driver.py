"""Example driver: evolve one star particle on the synthetic tables."""

from __future__ import annotations

import argparse
import logging

from pyenrich.config import StellarEvolutionConfig
from pyenrich.constants import Element
from pyenrich.engine import evolve_star
from pyenrich.properties import build_properties
from pyenrich.state import StarParticle
from pyenrich.synthetic import solar_composition, synthetic_tables


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evolve one star particle and print what it releases per step.")
    parser.add_argument("--lifetime-model", default="PORTINARI_1998")
    parser.add_argument("--imf", default="chabrier")
    parser.add_argument("--metallicity", type=float, default=0.02)
    parser.add_argument("--age", type=float, default=0.0, help="initial age (Gyr)")
    parser.add_argument("--dt", type=float, default=0.05, help="step length (Gyr)")
    parser.add_argument("--steps", type=int, default=20)
    parser.add_argument("--backend", default="auto")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")

    cfg = StellarEvolutionConfig(
        lifetime_model=args.lifetime_model,
        imf_model=args.imf,
        backend=args.backend,
    )
    props = build_properties(cfg, **synthetic_tables())
    particle = StarParticle(
        age=args.age,
        metal_mass_fraction=solar_composition(args.metallicity),
        metal_mass_fraction_total=args.metallicity,
        time_since_enrich_gyr=args.age,
    )

    header = ["age", "num_snia", "metals", "snii", "agb"] + [e.name for e in Element]
    print(" ".join(f"{h:>11s}" for h in header))
    for _ in range(args.steps):
        record = evolve_star(particle, props, args.dt)
        row = [
            particle.age,
            record.num_snia,
            record.metal_mass_released,
            record.mass_from_snii,
            record.mass_from_agb,
            *record.metals_released,
        ]
        print(" ".join(f"{v:11.4e}" for v in row))
        particle.age += args.dt


if __name__ == "__main__":
    main()
