"""Tests for the cascade engine: gain, Friis noise, compression, P1dB and G/T."""

import math

import pytest

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.core.data_structures import Direction
from rfcascade.core.exceptions import CompressionError, MissingSpecificationError


def _lin(db):
    return 10 ** (db / 10)


def _db(lin):
    return 10 * math.log10(lin)


class TestSingleStage:
    def test_forward(self, calculator, lna):
        result = calculator.calculate([lna], "1.0", Direction.FORWARD, input_power_dbm=-30.0)
        assert result.complete
        assert result.total_gain_db == pytest.approx(15.0)
        assert result.total_nf_db == pytest.approx(1.5)
        assert result.final_output_dbm == pytest.approx(-15.0)
        assert result.eirp_dbm == pytest.approx(-15.0)
        assert result.output_p1db_dbm == pytest.approx(20.0)
        assert result.stages[0].label == "(1) LNA"
        assert result.stage_powers[lna.id].input_dbm == -30.0
        assert result.stage_powers[lna.id].output_dbm == pytest.approx(-15.0)

    def test_reverse(self, calculator, lna):
        result = calculator.calculate([lna], "1", "RX")
        assert result.total_nf_db == pytest.approx(1.5)
        assert result.output_p1db_dbm is None
        assert result.eirp_dbm is None
        assert result.g_ant_db == 0.0
        t_rx = 290.0 * (_lin(1.5) - 1)
        assert result.t_rx_k == pytest.approx(t_rx)
        assert result.t_sys_k == pytest.approx(290.0 + t_rx)
        assert result.g_over_t_dbk == pytest.approx(-_db(290.0 + t_rx))

    def test_empty_chain(self, calculator):
        with pytest.raises(ValueError):
            calculator.calculate([], "1.0")


class TestCascade:
    @pytest.mark.parametrize("direction", ["TX", "RX"])
    def test_all_passive_chain(self, calculator, make_passive, direction):
        chain = [make_passive("F1", 1.5), make_passive("F2", 3.0), make_passive("F3", 0.5)]
        result = calculator.calculate(chain, "1.0", direction)
        assert result.total_gain_db == pytest.approx(-5.0)
        assert result.total_nf_db == pytest.approx(5.0)
        assert result.passive_gain_db == pytest.approx(-5.0)

    def test_friis_two_stage(self, calculator, lna, mixer):
        result = calculator.calculate([lna, mixer], "1.0", "TX")
        expected_f = _lin(1.5) + (_lin(7.0) - 1) / _lin(15.0)
        assert result.total_nf_db == pytest.approx(_db(expected_f))
        assert result.total_gain_db == pytest.approx(8.0)
        assert [s.cumulative_nf_db for s in result.stages] == pytest.approx([1.5, _db(expected_f)])

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_zero_stage_leaves_totals_unchanged(self, calculator, make_active, lna, mixer, position):
        base = calculator.calculate([lna, mixer], "1.0", "TX", -40.0)
        chain = [lna, mixer]
        chain.insert(position, make_active("Through", gain_db=0.0, nf_db=0.0))
        result = calculator.calculate(chain, "1.0", "TX", -40.0)
        assert result.total_gain_db == pytest.approx(base.total_gain_db)
        assert result.total_nf_db == pytest.approx(base.total_nf_db)
        assert result.final_output_dbm == pytest.approx(base.final_output_dbm)

    def test_gain_partition(self, calculator, lna, make_passive, make_antenna):
        chain = [lna, make_passive("Filter", 1.5), make_antenna("Horn", 12.0)]
        result = calculator.calculate(chain, "1.0", "TX")
        assert result.active_gain_db == pytest.approx(15.0)
        assert result.passive_gain_db == pytest.approx(-1.5)
        assert result.antenna_gain_db == pytest.approx(12.0)
        assert result.total_gain_db == pytest.approx(25.5)

    def test_runs_do_not_share_state(self, calculator, lna):
        first = calculator.calculate([lna], "1.0", "TX", -50.0)
        second = calculator.calculate([lna], "1.0", "TX", -20.0)
        assert first.stage_powers[lna.id].input_dbm == -50.0
        assert second.stage_powers[lna.id].input_dbm == -20.0
        assert not hasattr(lna, 'stage_powers')

    def test_missing_spec(self, calculator, lna, make_active):
        other = make_active("HighBand", gain_db=10.0, freq="2.0")
        with pytest.raises(MissingSpecificationError) as excinfo:
            calculator.calculate([lna, other], "2.0", "TX")
        assert excinfo.value.component is lna
        assert excinfo.value.frequency == "2.0"


class TestAntennaNoise:
    def test_forward_antenna_gain_enters_noise_cascade(self, calculator, lna, make_antenna):
        ant = make_antenna(gain_db=12.0, nf_db=6.0)
        result = calculator.calculate([ant, lna], "1.0", "TX")
        expected_f = 1.0 + (_lin(1.5) - 1) / _lin(12.0)
        assert result.total_nf_db == pytest.approx(_db(expected_f))
        assert result.stages[0].cumulative_nf_db == pytest.approx(0.0)

    def test_reverse_skips_leading_antenna(self, calculator, lna, make_antenna):
        ant = make_antenna(gain_db=12.0, nf_db=6.0)
        result = calculator.calculate([ant, lna], "1.0", "RX")
        assert result.total_nf_db == pytest.approx(1.5)
        assert result.total_gain_db == pytest.approx(27.0)

    def test_antenna_stored_nf_never_used(self, calculator, lna, make_antenna):
        quiet = calculator.calculate([make_antenna(gain_db=12.0, nf_db=0.0), lna], "1.0", "RX")
        noisy = calculator.calculate([make_antenna(gain_db=12.0, nf_db=9.0), lna], "1.0", "RX")
        assert noisy.total_nf_db == pytest.approx(quiet.total_nf_db)
        assert noisy.g_over_t_dbk == pytest.approx(quiet.g_over_t_dbk)


class TestGOverT:
    def test_receive_front_end(self, calculator, lna, mixer, make_antenna):
        result = calculator.calculate([make_antenna(gain_db=12.0), lna, mixer], "1.0", "RX")
        f_total = _lin(1.5) + (_lin(7.0) - 1) / _lin(15.0)
        assert result.total_nf_db == pytest.approx(_db(f_total))
        assert result.g_ant_db == pytest.approx(12.0)
        assert result.t_sys_k == pytest.approx(290.0 * f_total)
        assert result.t_sys_dbk == pytest.approx(_db(290.0 * f_total))
        assert result.g_over_t_dbk == pytest.approx(12.0 - _db(290.0 * f_total))

    def test_antenna_gain_shifts_g_over_t(self, calculator, lna, make_antenna):
        low = calculator.calculate([make_antenna(gain_db=12.0), lna], "1.0", "RX")
        high = calculator.calculate([make_antenna(gain_db=15.0), lna], "1.0", "RX")
        assert high.g_over_t_dbk - low.g_over_t_dbk == pytest.approx(3.0)

    def test_consecutive_leading_antennas_are_summed(self, calculator, lna, make_antenna):
        chain = [make_antenna("Reflector", 20.0), make_antenna("Feed", 5.0), lna]
        result = calculator.calculate(chain, "1.0", "RX")
        assert result.g_ant_db == pytest.approx(25.0)

    def test_custom_reference_temperature(self, lna):
        result = LinkBudgetCalculator(reference_temperature=100.0).calculate([lna], "1.0", "RX")
        assert result.t_ant_k == 100.0
        assert result.t_sys_k == pytest.approx(100.0 * _lin(1.5))


class TestCompression:
    def test_compressed_stage_row_is_kept(self, calculator, make_active):
        driver = make_active("Driver", gain_db=30.0, op1db_dbm=40.0)
        final = make_active("Final", gain_db=20.0, op1db_dbm=10.0)
        with pytest.raises(CompressionError) as excinfo:
            calculator.calculate([driver, final], "1.0", "TX", input_power_dbm=-20.0)
        error = excinfo.value
        assert error.component is final
        assert error.overshoot_db == pytest.approx(20.0)
        assert not error.result.complete
        assert [s.label for s in error.result.stages] == ["(1) Driver", "(2) Final"]
        assert error.result.stages[-1].cumulative_power_dbm == pytest.approx(30.0)

    def test_first_stage_compression(self, calculator, make_active):
        amp = make_active("Amp", gain_db=10.0, op1db_dbm=0.0)
        with pytest.raises(CompressionError) as excinfo:
            calculator.calculate([amp, make_active("Next")], "1.0", "TX", input_power_dbm=0.0)
        assert len(excinfo.value.result.stages) == 1

    def test_exactly_at_p1db_is_not_compressed(self, calculator, make_active):
        amp = make_active("Amp", gain_db=10.0, op1db_dbm=0.0)
        result = calculator.calculate([amp], "1.0", "TX", input_power_dbm=-10.0)
        assert result.complete

    def test_receive_direction_never_compresses(self, calculator, make_active):
        amp = make_active("Amp", gain_db=30.0, op1db_dbm=0.0)
        result = calculator.calculate([amp], "1.0", "RX", input_power_dbm=80.0)
        assert result.complete
        assert result.final_output_dbm == pytest.approx(110.0)

    def test_antenna_never_compresses(self, calculator, make_antenna):
        result = calculator.calculate([make_antenna(gain_db=12.0)], "1.0", "TX", input_power_dbm=95.0)
        assert result.complete
        assert result.eirp_dbm == pytest.approx(107.0)


class TestOutputP1dB:
    def test_two_amplifiers(self, calculator, lna, make_active):
        pa = make_active("PA", gain_db=20.0, nf_db=5.0, op1db_dbm=33.0)
        result = calculator.calculate([lna, pa], "1.0", "TX")
        expected_mw = 1.0 / (1.0 / _lin(33.0) + 1.0 / (_lin(20.0) * _lin(20.0)))
        assert result.output_p1db_dbm == pytest.approx(_db(expected_mw))

    def test_antennas_only_is_unbounded(self, calculator, make_antenna):
        result = calculator.calculate([make_antenna(gain_db=3.0)], "1.0", "TX")
        assert result.output_p1db_dbm == math.inf

    def test_trailing_antenna_raises_output_p1db(self, calculator, lna, make_antenna):
        bare = calculator.calculate([lna], "1.0", "TX")
        with_antenna = calculator.calculate([lna, make_antenna(gain_db=10.0)], "1.0", "TX")
        assert with_antenna.output_p1db_dbm - bare.output_p1db_dbm == pytest.approx(10.0)
