"""
Test suite for provtree

Contains:
- tests/unit/          : Unit tests for individual modules
"""
