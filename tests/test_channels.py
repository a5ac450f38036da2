from __future__ import annotations

import math
import unittest

import numpy as np

from pyenrich.channels import evolve_agb, evolve_snia, evolve_snii
from pyenrich.config import StellarEvolutionConfig
from pyenrich.constants import ELEMENT_COUNT, Element
from pyenrich.errors import NormalizationError
from pyenrich.imf_mass_bins import IMFMoment
from pyenrich.interpolation import determine_bin_yield
from pyenrich.lifetimes import LifetimeModel
from pyenrich.model_tables import YieldTable
from pyenrich.properties import build_properties
from pyenrich.state import EnrichmentRecord, StarParticle
from pyenrich.synthetic import snia_yields, solar_composition, synthetic_tables


def _props(tables=None, **overrides):
    overrides.setdefault("lifetime_model", LifetimeModel.PADOVANI_MATTEUCCI_1993)
    return build_properties(StellarEvolutionConfig(backend="numpy", **overrides), **(tables or synthetic_tables()))


def _particle(metallicity: float, composition=None, clock: float = 0.0) -> StarParticle:
    if composition is None:
        composition = solar_composition(metallicity)
    return StarParticle(0.0, composition, metallicity, time_since_enrich_gyr=clock)


def _integrate_table(props, table, lo, hi, particle, weight_of_row):
    low, high, dz = determine_bin_yield(math.log10(max(particle.metal_mass_fraction_total, 1.0e-20)), table.log10_metallicity)
    weight = (1.0 - dz) * weight_of_row(low) + dz * weight_of_row(high)
    return props.imf.integrate(lo, hi, 0.0, IMFMoment.YIELD, weight)


class TestTableChannels(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.props = _props()
        cls.snii_range = (math.log10(10.0), math.log10(40.0))
        cls.agb_range = (math.log10(1.0), math.log10(3.0))

    def _ejecta(self, table, lo, hi, particle):
        return _integrate_table(self.props, table, lo, hi, particle, lambda iz: table.ejecta[iz])

    def test_snii_released_mass_matches_ejecta(self) -> None:
        particle = _particle(0.02, 0.9 * solar_composition(0.02))
        record = EnrichmentRecord()
        lo, hi = self.snii_range
        evolve_snii(lo, hi, self.props, particle, record)

        norm0 = self._ejecta(self.props.snii, lo, hi, particle)
        released = record.metal_mass_released + record.metals_released[Element.H] + record.metals_released[Element.He]
        np.testing.assert_allclose(released, norm0, rtol=1.0e-10)
        self.assertAlmostEqual(record.mass_from_snii, float(np.sum(record.metals_released)), places=14)
        self.assertEqual(record.metals_from_snii, record.metal_mass_released)
        self.assertEqual(record.mass_from_agb, 0.0)

    def test_agb_released_mass_matches_ejecta(self) -> None:
        particle = _particle(0.01, 1.1 * solar_composition(0.01))
        record = EnrichmentRecord()
        lo, hi = self.agb_range
        evolve_agb(lo, hi, self.props, particle, record)

        norm0 = self._ejecta(self.props.agb, lo, hi, particle)
        released = record.metal_mass_released + record.metals_released[Element.H] + record.metals_released[Element.He]
        np.testing.assert_allclose(released, norm0, rtol=1.0e-10)
        self.assertGreater(record.mass_from_agb, 0.0)
        self.assertEqual(record.metals_from_agb, record.metal_mass_released)

    def test_consistent_composition_is_not_rescaled(self) -> None:
        particle = _particle(0.01)
        record = EnrichmentRecord()
        lo, hi = self.snii_range
        evolve_snii(lo, hi, self.props, particle, record)

        table = self.props.snii
        for e in (Element.H, Element.C, Element.O, Element.Fe):
            x = particle.metal_mass_fraction[e]
            expected = _integrate_table(
                self.props, table, lo, hi, particle, lambda iz: table.yields[iz, e] + x * table.ejecta[iz]
            )
            np.testing.assert_allclose(record.metals_released[e], expected, rtol=1.0e-10)

    def test_negative_element_yield_is_clamped(self) -> None:
        x = solar_composition(0.02)
        x[Element.He] += x[Element.H]
        x[Element.H] = 0.0
        particle = _particle(0.02, x)
        record = EnrichmentRecord()
        lo, hi = self.snii_range
        evolve_snii(lo, hi, self.props, particle, record)

        self.assertEqual(record.metals_released[Element.H], 0.0)
        self.assertTrue(np.all(record.metals_released >= 0.0))
        norm0 = self._ejecta(self.props.snii, lo, hi, particle)
        np.testing.assert_allclose(record.metal_mass_released + record.metals_released[Element.He], norm0, rtol=1.0e-10)

    def test_snii_window_is_clamped(self) -> None:
        particle = _particle(0.02)
        inside = EnrichmentRecord()
        evolve_snii(math.log10(6.0), math.log10(100.0), self.props, particle, inside)
        wide = EnrichmentRecord()
        evolve_snii(math.log10(2.0), math.log10(150.0), self.props, particle, wide)
        np.testing.assert_allclose(wide.metals_released, inside.metals_released, rtol=1.0e-12)

        below = EnrichmentRecord()
        evolve_snii(math.log10(2.0), math.log10(5.0), self.props, particle, below)
        self.assertEqual(below.as_dict(), EnrichmentRecord().as_dict())

    def test_agb_ignores_masses_above_snii_threshold(self) -> None:
        particle = _particle(0.02)
        record = EnrichmentRecord()
        evolve_agb(math.log10(7.0), math.log10(20.0), self.props, particle, record)
        self.assertEqual(record.as_dict(), EnrichmentRecord().as_dict())

    def test_contributions_accumulate(self) -> None:
        particle = _particle(0.02)
        record = EnrichmentRecord()
        lo, hi = self.snii_range
        evolve_snii(lo, hi, self.props, particle, record)
        once = record.metals_released.copy()
        evolve_snii(lo, hi, self.props, particle, record)
        np.testing.assert_allclose(record.metals_released, 2.0 * once, rtol=1.0e-14)

    def test_non_positive_normalization_is_fatal(self) -> None:
        tables = synthetic_tables()
        mass = np.array([6.0, 100.0])
        tables["snii"] = YieldTable(
            mass,
            np.array([0.0, 0.02]),
            np.zeros((2, ELEMENT_COUNT, 2)),
            np.array([[5.0, 90.0], [5.0, 90.0]]),
            -np.array([[1.0, 10.0], [1.0, 10.0]]),
        )
        props = _props(tables)
        particle = _particle(0.0, np.zeros(ELEMENT_COUNT))
        with self.assertRaises(NormalizationError):
            evolve_snii(math.log10(10.0), math.log10(50.0), props, particle, EnrichmentRecord())


class TestDisabledChannels(unittest.TestCase):
    def test_snii_disabled_zeroes_its_fields(self) -> None:
        props = _props(snii_mass_transfer=False)
        record = EnrichmentRecord(mass_from_snii=5.0, metals_from_snii=3.0)
        evolve_snii(math.log10(10.0), math.log10(40.0), props, _particle(0.02), record)
        self.assertEqual(record.mass_from_snii, 0.0)
        self.assertEqual(record.metals_from_snii, 0.0)
        self.assertTrue(np.all(record.metals_released == 0.0))

    def test_agb_disabled_is_a_no_op(self) -> None:
        props = _props(agb_mass_transfer=False)
        record = EnrichmentRecord(mass_from_agb=5.0, metals_from_agb=3.0)
        evolve_agb(math.log10(1.0), math.log10(3.0), props, _particle(0.02), record)
        self.assertEqual(record.mass_from_agb, 5.0)
        self.assertEqual(record.metals_from_agb, 3.0)
        self.assertTrue(np.all(record.metals_released == 0.0))

    def test_snia_disabled_still_counts_events(self) -> None:
        props = _props(snia_mass_transfer=False)
        record = EnrichmentRecord(mass_from_snia=1.0, metals_from_snia=1.0, iron_from_snia=1.0)
        particle = _particle(0.02, clock=1.0)
        evolve_snia(math.log10(2.0), math.log10(3.0), props, particle, record, 0.5)
        self.assertGreater(record.num_snia, 0.0)
        self.assertEqual(record.mass_from_snia, 0.0)
        self.assertEqual(record.metals_from_snia, 0.0)
        self.assertEqual(record.iron_from_snia, 0.0)
        self.assertTrue(np.all(record.metals_released == 0.0))


class TestSNIa(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.props = _props()
        cls.eff = cls.props.snia_efficiency
        cls.tau = cls.props.snia_timescale_gyr

    def test_only_massive_stars_dying_is_a_no_op(self) -> None:
        particle = _particle(0.02, clock=0.3)
        record = EnrichmentRecord()
        evolve_snia(math.log10(8.5), math.log10(20.0), self.props, particle, record, 0.1)
        self.assertEqual(record.as_dict(), EnrichmentRecord().as_dict())
        self.assertAlmostEqual(particle.time_since_enrich_gyr, 0.4)

    def test_exponential_delay_time_distribution(self) -> None:
        particle = _particle(0.02, clock=1.0)
        record = EnrichmentRecord()
        evolve_snia(math.log10(2.0), math.log10(3.0), self.props, particle, record, 0.5)

        num = self.eff * (math.exp(-1.0 / self.tau) - math.exp(-1.5 / self.tau))
        yields = snia_yields()
        self.assertAlmostEqual(record.num_snia, num, places=15)
        np.testing.assert_allclose(record.metals_released, num * yields.yields, rtol=1.0e-12)
        self.assertAlmostEqual(record.iron_from_snia, num * yields.yields[Element.Fe], places=15)
        self.assertAlmostEqual(record.metal_mass_released, num * yields.total_metals, places=15)
        self.assertAlmostEqual(record.mass_from_snia, record.metals_from_snia, places=15)
        self.assertAlmostEqual(particle.time_since_enrich_gyr, 1.5)

    def test_clock_starts_at_lifetime_of_most_massive_progenitor(self) -> None:
        particle = _particle(0.02, clock=0.0)
        record = EnrichmentRecord()
        evolve_snia(math.log10(5.9), math.log10(100.0), self.props, particle, record, 0.05)

        start = self.props.lifetimes.lifetime(8.0, 0.02)
        self.assertTrue(0.0 < start < 0.05)
        num = self.eff * (math.exp(-start / self.tau) - math.exp(-0.05 / self.tau))
        np.testing.assert_allclose(record.num_snia, num, rtol=1.0e-12)
        self.assertAlmostEqual(particle.time_since_enrich_gyr, 0.05, places=14)


if __name__ == "__main__":
    unittest.main()
