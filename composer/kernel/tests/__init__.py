"""Composer kernel tests."""
