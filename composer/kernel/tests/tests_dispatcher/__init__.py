"""Dispatcher tests: variant tables, casing, fallbacks, props validation."""
