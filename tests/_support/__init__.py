"""Test support: sample models shared across the test suite."""
