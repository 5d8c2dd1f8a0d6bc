"""Tests for domain exception hierarchy."""

from __future__ import annotations

import unittest

from evbus.exceptions import (
    ConfigValidationError,
    EventBusError,
    ListenerError,
    LoopRequiredError,
    UnhandledErrorFault,
)


class ExceptionHierarchyTests(unittest.TestCase):
    """Validate exception inheritance contract."""

    def test_exception_hierarchy(self) -> None:
        self.assertTrue(issubclass(EventBusError, RuntimeError))
        self.assertTrue(issubclass(ListenerError, EventBusError))
        self.assertTrue(issubclass(UnhandledErrorFault, EventBusError))
        self.assertTrue(issubclass(ConfigValidationError, EventBusError))
        self.assertTrue(issubclass(LoopRequiredError, EventBusError))

    def test_listener_error_carries_cause(self) -> None:
        cause = KeyError("missing")

        def handler() -> None:
            pass

        error = ListenerError("click", cause, handler)
        self.assertIs(error.cause, cause)
        self.assertIs(error.__cause__, cause)
        self.assertEqual(error.event, "click")
        self.assertIn("handler", str(error))
        self.assertIn("'click'", str(error))

    def test_unhandled_fault_without_arguments(self) -> None:
        fault = UnhandledErrorFault(())
        self.assertEqual(fault.cause, ())
        self.assertIsNone(fault.__cause__)


if __name__ == "__main__":
    unittest.main()
