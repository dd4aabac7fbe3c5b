# PATH: tests/unit/test_imports_contract.py
"""
Import contract smoke tests.

PURPOSE: Catch ImportError regressions (including import cycles between
monitoring, execution and strategy) EARLY.
RUN FIRST: python -m pytest tests/unit/test_imports_contract.py -v
"""

import importlib
import unittest


class TestPackageImports(unittest.TestCase):
    """Every package imports on its own, in any order."""

    PACKAGES = (
        "core",
        "config",
        "config.store",
        "chains",
        "dex",
        "dex.adapters",
        "monitoring",
        "execution",
        "strategy",
        "strategy.jobs",
        "strategy.jobs.run_scan",
    )

    def test_import_each(self):
        for name in self.PACKAGES:
            with self.subTest(package=name):
                importlib.import_module(name)


class TestCoreContract(unittest.TestCase):
    def test_outcome_kinds(self):
        from core.constants import AttemptOutcomeKind

        self.assertEqual(
            {k.value for k in AttemptOutcomeKind},
            {"success", "slippage", "other"},
        )

    def test_slippage_code(self):
        from core.constants import SLIPPAGE_TOLERANCE_EXCEEDED_CODE

        self.assertEqual(SLIPPAGE_TOLERANCE_EXCEEDED_CODE, 6001)

    def test_native_balance_label(self):
        from core.constants import NATIVE_BALANCE_LABEL

        self.assertEqual(NATIVE_BALANCE_LABEL, "nativeSol")

    def test_document_ids(self):
        from core.constants import SETTINGS_DOCUMENT_ID, WHITELIST_DOCUMENT_ID

        self.assertEqual(WHITELIST_DOCUMENT_ID, "arb-v4-token-whitelist")
        self.assertEqual(SETTINGS_DOCUMENT_ID, "arb-v4-settings")


class TestPublicExports(unittest.TestCase):
    def test_strategy_exports(self):
        import strategy

        for name in ("SettingsCache", "QuoteEvaluator", "ExecutionGate", "ScanLoop", "run_periodic"):
            self.assertTrue(hasattr(strategy, name), name)

    def test_execution_exports(self):
        import execution

        for name in ("SwapExecutor", "SwapDispatcher", "classify_result"):
            self.assertTrue(hasattr(execution, name), name)

    def test_monitoring_exports(self):
        import monitoring

        self.assertTrue(hasattr(monitoring, "ArbMetrics"))
        self.assertTrue(hasattr(monitoring, "BalanceTracker"))


if __name__ == "__main__":
    unittest.main()
