"""
Resolver Test Suite

1. test_resolver_blocks.py - Page vs collection, block normalization, malformed blocks
2. test_resolver_recursion.py - Nested expansion, references, recursion bound
"""
