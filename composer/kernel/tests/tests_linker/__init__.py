"""Linker tests: join filtering, order, duplicate handling."""
