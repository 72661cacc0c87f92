"""
Test suite for calc-entry

Contains:
- tests/unit/          : Unit tests for individual modules
"""
