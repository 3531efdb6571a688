"""Tests for unit conversions, free-space loss and array gain."""

import math

import pytest

from rfcascade.core.units import db_to_linear, dbm_to_mw, frequency_key, linear_to_db, mw_to_dbm
from rfcascade.design.antenna_array import array_gain_db
from rfcascade.environment.propagation import free_space_path_loss


class TestConversions:
    def test_db_linear(self):
        assert db_to_linear(0.0) == pytest.approx(1.0)
        assert db_to_linear(10.0) == pytest.approx(10.0)
        assert db_to_linear(-3.0) == pytest.approx(0.501187, rel=1e-5)
        assert linear_to_db(100.0) == pytest.approx(20.0)

    def test_non_positive_ratio_is_minus_infinity(self):
        assert linear_to_db(0.0) == -math.inf
        assert linear_to_db(-2.0) == -math.inf
        assert mw_to_dbm(0.0) == -math.inf

    def test_dbm_mw(self):
        assert dbm_to_mw(0.0) == pytest.approx(1.0)
        assert dbm_to_mw(30.0) == pytest.approx(1000.0)
        assert mw_to_dbm(1000.0) == pytest.approx(30.0)
        assert mw_to_dbm(math.inf) == math.inf


class TestFrequencyKey:
    @pytest.mark.parametrize("value", ["1", 1, 1.0, "1.0", " 1.00 "])
    def test_equivalent_spellings_share_a_key(self, value):
        assert frequency_key(value) == "1.0"

    def test_fractional(self):
        assert frequency_key("2.4") == "2.4"

    @pytest.mark.parametrize("value", ["abc", "", None, "nan", "inf"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            frequency_key(value)


class TestFreeSpacePathLoss:
    def test_zero_or_negative_distance_is_lossless(self):
        assert free_space_path_loss(1.0, 0.0) == 0.0
        assert free_space_path_loss(1.0, -10.0) == 0.0

    def test_one_meter_at_one_ghz(self):
        expected = 20 * math.log10(4 * math.pi * 1.0 * 1e9 / 299792458.0)
        assert free_space_path_loss(1.0, 100.0) == pytest.approx(expected)
        assert expected == pytest.approx(32.45, abs=0.01)

    def test_doubling_distance_adds_six_db(self):
        near = free_space_path_loss(10.0, 50.0)
        far = free_space_path_loss(10.0, 100.0)
        assert far - near == pytest.approx(20 * math.log10(2))

    def test_monotonic_in_distance_and_frequency(self):
        distances = [10.0, 50.0, 100.0, 1000.0]
        losses = [free_space_path_loss(5.0, d) for d in distances]
        assert losses == sorted(losses)
        assert free_space_path_loss(2.0, 100.0) < free_space_path_loss(4.0, 100.0)

    def test_near_field_clamps_to_zero(self):
        assert free_space_path_loss(0.001, 1.0) == 0.0


class TestArrayGain:
    def test_four_by_four(self):
        assert array_gain_db(4, 4) == pytest.approx(12.0412, abs=1e-4)

    def test_single_element(self):
        assert array_gain_db(1, 1) == 0.0

    @pytest.mark.parametrize("rows, cols", [(0, 4), (4, -1), (2.5, 2)])
    def test_invalid_dimensions(self, rows, cols):
        with pytest.raises(ValueError):
            array_gain_db(rows, cols)
