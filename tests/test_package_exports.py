"""Tests for top-level package exports."""

from __future__ import annotations

import unittest

import evbus


class PackageExportTests(unittest.TestCase):
    """Ensure exported symbols resolve."""

    def test_exports_resolve_known_symbols(self) -> None:
        for name in evbus.__all__:
            self.assertIsNotNone(getattr(evbus, name), name)
        self.assertTrue(callable(evbus.load_config))
        self.assertTrue(callable(evbus.configure_logging))

    def test_exports_are_the_submodule_objects(self) -> None:
        from evbus import bus, exceptions, listeners

        self.assertIs(evbus.EventBus, bus.EventBus)
        self.assertIs(evbus.ListenerError, exceptions.ListenerError)
        self.assertIs(evbus.ListenerSet, listeners.ListenerSet)

    def test_all_matches_lazy_export_table(self) -> None:
        self.assertEqual(sorted(evbus.__all__), sorted(evbus._EXPORTS))
        self.assertIn("EventBus", dir(evbus))

    def test_reserved_event_names(self) -> None:
        self.assertEqual(evbus.NEW_LISTENER, "newListener")
        self.assertEqual(evbus.REMOVE_LISTENER, "removeListener")
        self.assertEqual(evbus.ERROR_EVENT, "error")

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(evbus, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
