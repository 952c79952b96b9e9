"""
Tests for the engine constants module.
"""

import math

from apsf.constants import (
    REF_PRESSURE_MBAR,
    FIRST_START,
    START_SIGNS,
    CONSISTENCY_KEYS,
    FULL_CIRCLE,
    MAXIT,
)


class TestConstants:

    def test_reference_pressure(self):
        assert REF_PRESSURE_MBAR == 1013.25

    def test_first_start(self):
        assert FIRST_START == (0.05, -0.14, 0.23, -0.32, -0.05)

    def test_first_start_follows_sign_pattern(self):
        for x, s in zip(FIRST_START, START_SIGNS):
            assert math.copysign(1.0, x) == s

    def test_consistency_keys(self):
        assert set(CONSISTENCY_KEYS) == {"res", "ext", "snsznt", "snsfov", "snspos"}

    def test_full_circle(self):
        assert abs(FULL_CIRCLE - 2.0 * math.pi) < 1e-15

    def test_iteration_budget_is_large(self):
        assert MAXIT >= 100000
