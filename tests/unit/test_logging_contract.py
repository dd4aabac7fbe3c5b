# PATH: tests/unit/test_logging_contract.py
"""
Tests specifically for logging contract enforcement.

No kwargs to logger; only extra={"context": {...}} allowed.
"""

import ast
import json
import logging
import unittest
from pathlib import Path
from typing import List, Dict, Any

from core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    clear_global_context,
    get_logger,
    set_global_context,
)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SOURCE_PACKAGES = ("core", "config", "chains", "dex", "strategy", "execution", "monitoring")


class TestLoggingContractEnforcement(unittest.TestCase):
    """AST-based tests for logging contract."""

    ALLOWED_KWARGS = {"exc_info", "extra", "stack_info", "stacklevel"}

    def _find_logger_violations(self, source_code: str) -> List[Dict[str, Any]]:
        """Find logger calls with invalid kwargs using AST."""
        violations = []
        tree = ast.parse(source_code)

        for node in ast.walk(tree):
            if not isinstance(node, ast.Call):
                continue

            if not isinstance(node.func, ast.Attribute):
                continue

            # Check if it's a logger method
            method_name = node.func.attr
            if method_name not in ("debug", "info", "warning", "error", "critical", "exception"):
                continue

            obj = node.func.value
            is_logger = False

            if isinstance(obj, ast.Name):
                is_logger = "log" in obj.id.lower()
            elif isinstance(obj, ast.Attribute):
                is_logger = "log" in obj.attr.lower()

            if not is_logger:
                continue

            for kw in node.keywords:
                if kw.arg and kw.arg not in self.ALLOWED_KWARGS:
                    violations.append({
                        "line": node.lineno,
                        "method": method_name,
                        "invalid_kwarg": kw.arg,
                    })

        return violations

    def _source_files(self) -> List[Path]:
        files = []
        for package in SOURCE_PACKAGES:
            files.extend(sorted((PROJECT_ROOT / package).rglob("*.py")))
        return files

    def test_sources_found(self):
        names = {p.relative_to(PROJECT_ROOT).as_posix() for p in self._source_files()}
        self.assertIn("strategy/jobs/run_scan.py", names)
        self.assertIn("execution/swap_executor.py", names)

    def test_no_invalid_kwargs(self):
        """No module passes context as logger kwargs."""
        msg = ""
        for filepath in self._source_files():
            violations = self._find_logger_violations(filepath.read_text(encoding="utf-8"))
            for v in violations:
                msg += f"  {filepath.name}:{v['line']}: logger.{v['method']}(..., {v['invalid_kwarg']}=...)\n"
        if msg:
            self.fail(f"Logging violations:\n{msg}")

    def test_detector_catches_violation(self):
        source = 'logger.info("Spread", symbol="BONK")\n'
        self.assertEqual(len(self._find_logger_violations(source)), 1)


class TestLoggingContextCapture(unittest.TestCase):
    """Tests that context is properly captured in log records."""

    def setUp(self):
        self.captured_records = []

        class CapturingHandler(logging.Handler):
            def __init__(self, records_list):
                super().__init__()
                self.records = records_list

            def emit(self, record):
                self.records.append(record)

        name = f"looparb.test_capture_{id(self)}"
        self.base_logger = logging.getLogger(name)
        self.base_logger.setLevel(logging.DEBUG)
        self.base_logger.handlers = []
        self.base_logger.propagate = False
        self.base_logger.addHandler(CapturingHandler(self.captured_records))
        self.logger = get_logger(name, symbol="BONK")

    def tearDown(self):
        clear_global_context()

    def test_adapter_merges_default_context(self):
        self.logger.info("Spread 150", extra={"context": {"spread": 150}})

        record = self.captured_records[0]
        self.assertEqual(record.context, {"symbol": "BONK", "spread": 150})

    def test_call_context_overrides_default(self):
        self.logger.info("Spread", extra={"context": {"symbol": "SOL"}})
        self.assertEqual(self.captured_records[0].context["symbol"], "SOL")

    def test_exc_info_with_context(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            self.logger.error(
                "Caught error",
                exc_info=True,
                extra={"context": {"operation": "test"}}
            )

        record = self.captured_records[0]
        self.assertIsNotNone(record.exc_info)
        self.assertEqual(record.context["operation"], "test")

    def test_json_formatter_includes_global_context(self):
        set_global_context(service="looparb-scan", version="test")
        self.logger.info("Swap confirmed", extra={"context": {"txid": "abc"}})

        entry = json.loads(JSONFormatter().format(self.captured_records[0]))
        self.assertEqual(entry["message"], "Swap confirmed")
        self.assertEqual(entry["context"]["service"], "looparb-scan")
        self.assertEqual(entry["context"]["txid"], "abc")
        self.assertEqual(entry["context"]["symbol"], "BONK")

    def test_console_formatter(self):
        self.logger.warning("Balance query failed")
        line = ConsoleFormatter().format(self.captured_records[0])
        self.assertIn("WARNING", line)
        self.assertIn("symbol=BONK", line)


if __name__ == "__main__":
    unittest.main()
