from __future__ import annotations

import contextlib
import io
import unittest

import numpy as np

from pyenrich.config import StellarEvolutionConfig
from pyenrich.constants import ELEMENT_COUNT, ELEMENT_NAMES, Element
from pyenrich.diagnostics import diagnostics_from_record
from pyenrich.driver import main as driver_main
from pyenrich.errors import ConfigurationError, LifetimeModelError, TableError
from pyenrich.imf_mass_bins import IMFModel
from pyenrich.lifetimes import LifetimeModel
from pyenrich.model_tables import SNIaYields, YieldTable
from pyenrich.properties import build_properties
from pyenrich.synthetic import agb_table, snia_yields, snii_table, synthetic_tables


class TestStellarEvolutionConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = StellarEvolutionConfig()
        self.assertIs(cfg.lifetime_model, LifetimeModel.PORTINARI_1998)
        self.assertIs(cfg.imf_model, IMFModel.CHABRIER)
        self.assertEqual(cfg.snii_yield_factors, (1.0,) * ELEMENT_COUNT)
        self.assertTrue(cfg.snia_mass_transfer and cfg.snii_mass_transfer and cfg.agb_mass_transfer)

    def test_selectors_are_parsed(self) -> None:
        cfg = StellarEvolutionConfig(lifetime_model=1, imf_model="salpeter")
        self.assertIs(cfg.lifetime_model, LifetimeModel.MAEDER_MEYNET_1989)
        self.assertIs(cfg.imf_model, IMFModel.POWER_LAW)
        with self.assertRaises(LifetimeModelError):
            StellarEvolutionConfig(lifetime_model=3)

    def test_invalid_values(self) -> None:
        bad = [
            {"snia_efficiency": -1.0},
            {"snia_efficiency": float("nan")},
            {"snia_timescale_gyr": 0.0},
            {"imf_n_bins": 2},
            {"imf_min_mass": 10.0, "imf_max_mass": 5.0},
            {"imf_max_mass": 120.0},
            {"snii_yield_factors": (1.0, 2.0)},
            {"time_to_gyr": 0.0},
            {"backend": "gpu"},
            {"yield_table_path": " "},
        ]
        for kwargs in bad:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ConfigurationError):
                    StellarEvolutionConfig(**kwargs)

    def test_configuration_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            StellarEvolutionConfig(snia_timescale_gyr=-1.0)

    def test_from_params(self) -> None:
        params = {
            "EagleStellarEvolution:filename": "./yieldtables/",
            "EagleStellarEvolution:lifetime_model": "1",
            "EagleStellarEvolution:agb_mass_transfer": "0",
            "EagleStellarEvolution:snia_efficiency": "1e-3",
            "EagleStellarEvolution:imf_n_bins": "100",
            "Cosmology:h": 0.6777,
        }
        cfg = StellarEvolutionConfig.from_params(params)
        self.assertEqual(cfg.yield_table_path, "./yieldtables/")
        self.assertIs(cfg.lifetime_model, LifetimeModel.MAEDER_MEYNET_1989)
        self.assertFalse(cfg.agb_mass_transfer)
        self.assertTrue(cfg.snii_mass_transfer)
        self.assertAlmostEqual(cfg.snia_efficiency, 1.0e-3)
        self.assertEqual(cfg.imf_n_bins, 100)

    def test_from_params_rejects_unknown_and_malformed_keys(self) -> None:
        with self.assertRaises(ConfigurationError):
            StellarEvolutionConfig.from_params({"EagleStellarEvolution:snia_rate": 1.0})
        with self.assertRaises(ConfigurationError):
            StellarEvolutionConfig.from_params({"EagleStellarEvolution:snia_efficiency": "fast"})
        with self.assertRaises(ConfigurationError):
            StellarEvolutionConfig.from_params({"EagleStellarEvolution:snii_mass_transfer": "maybe"})


class TestYieldTables(unittest.TestCase):
    def test_from_named_elements_reorders_rows(self) -> None:
        table = snii_table()
        names = list(reversed(ELEMENT_NAMES)) + ["Sulphur"]
        raw = np.concatenate([table.yields[:, ::-1, :], np.zeros((table.yields.shape[0], 1, table.yields.shape[2]))], axis=1)
        loaded = YieldTable.from_named_elements(names, table.mass, table.metallicity, raw, table.ejecta, table.total_metals)
        np.testing.assert_array_equal(loaded.yields, table.yields)

        snia = snia_yields()
        loaded = SNIaYields.from_named_elements(list(reversed(ELEMENT_NAMES)), snia.yields[::-1], snia.total_metals)
        self.assertEqual(loaded.yields[Element.Fe], snia.yields[Element.Fe])

    def test_missing_element(self) -> None:
        with self.assertRaises(TableError):
            SNIaYields.from_named_elements(ELEMENT_NAMES[:-1], np.ones(ELEMENT_COUNT - 1), 1.0)

    def test_inconsistent_tables(self) -> None:
        table = agb_table()
        with self.assertRaises(TableError):
            YieldTable(table.mass, table.metallicity, table.yields[:, :, :-1], table.ejecta, table.total_metals)
        with self.assertRaises(TableError):
            YieldTable(table.mass, table.metallicity, table.yields, table.ejecta + 10.0, table.total_metals)
        with self.assertRaises(TableError):
            YieldTable(table.mass[::-1], table.metallicity, table.yields, table.ejecta, table.total_metals)


class TestBuildProperties(unittest.TestCase):
    def test_tabulated_model_needs_table(self) -> None:
        tables = synthetic_tables()
        del tables["lifetimes"]
        with self.assertRaises(ConfigurationError):
            build_properties(StellarEvolutionConfig(backend="numpy"), **tables)

    def test_properties_are_read_only(self) -> None:
        props = build_properties(StellarEvolutionConfig(backend="numpy"), **synthetic_tables())
        n_bins = props.imf.bins.n_bins
        self.assertEqual(props.snii.yields.shape, (props.snii.n_z, ELEMENT_COUNT, n_bins))
        self.assertEqual(props.agb.ejecta.shape, (props.agb.n_z, n_bins))
        with self.assertRaises(ValueError):
            props.snii.yields[0, 0, 0] = 1.0
        with self.assertRaises(ValueError):
            props.imf.bins.by_number[0] = 1.0
        self.assertEqual(props.sn_energy_erg, 1.0e51)
        self.assertEqual(props.lifetime_model, LifetimeModel.PORTINARI_1998)

    def test_snii_yield_factors_scale_elements(self) -> None:
        factors = [1.0] * ELEMENT_COUNT
        factors[Element.Fe] = 2.0
        base = build_properties(StellarEvolutionConfig(backend="numpy"), **synthetic_tables())
        scaled = build_properties(StellarEvolutionConfig(backend="numpy", snii_yield_factors=factors), **synthetic_tables())
        np.testing.assert_allclose(scaled.snii.yields[:, Element.Fe], 2.0 * base.snii.yields[:, Element.Fe])
        np.testing.assert_array_equal(scaled.snii.yields[:, Element.O], base.snii.yields[:, Element.O])
        np.testing.assert_array_equal(scaled.agb.yields, base.agb.yields)


class TestPackageExports(unittest.TestCase):
    def test_diagnostics_entry_point(self) -> None:
        import pyenrich

        self.assertIs(pyenrich.diagnostics_from_record, diagnostics_from_record)
        summary = pyenrich.diagnostics_from_record(pyenrich.EnrichmentRecord())
        self.assertTrue(summary["all_checks_pass"])


class TestDriver(unittest.TestCase):
    def test_prints_one_row_per_step(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            driver_main(["--steps", "3", "--backend", "numpy", "--lifetime-model", "MAEDER_MEYNET_1989"])
        lines = out.getvalue().strip().splitlines()
        self.assertEqual(len(lines), 4)
        self.assertIn("num_snia", lines[0])

    def test_steps_across_lifetime_branch_join(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            driver_main(
                [
                    "--age", "0.0397",
                    "--dt", "1e-4",
                    "--steps", "2",
                    "--backend", "numpy",
                    "--lifetime-model", "PADOVANI_MATTEUCCI_1993",
                ]
            )
        self.assertEqual(len(out.getvalue().strip().splitlines()), 3)


if __name__ == "__main__":
    unittest.main()
