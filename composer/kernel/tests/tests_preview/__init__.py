"""
Preview List Test Suite

1. test_preview_reducer.py - Pure reducer: move, update, delete, insert, edit lifecycle
2. test_preview_list.py - Owned list facade, templates, seeding from records
"""
