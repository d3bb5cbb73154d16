"""
Conformance Test Suite

Property-based tests for the invariants every accrual computation must hold:
1. test_daycount_properties.py - zero-length periods, additivity, exact fractions
2. test_accrual_properties.py - idempotence, zero rate, zero period, rounding bounds,
   concurrent use

These tests use hypothesis for property-based testing.
"""
