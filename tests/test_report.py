"""Tests for the text report and result export."""

import pytest

from rfcascade.analysis.report import format_report, format_stage_table
from rfcascade.core.exceptions import CompressionError


def test_transmit_report(calculator, lna, mixer):
    result = calculator.calculate([lna, mixer], "1.0", "TX", input_power_dbm=-30.0)
    text = format_report(result)
    assert "mode: TX" in text
    assert "Cum. Pout (dBm)" in text
    assert "(1) LNA" in text and "(2) Mixer" in text
    assert "Final output (P_out/EIRP):" in text
    assert "-22 dBm" in text


def test_receive_report_has_g_over_t(calculator, lna, make_antenna):
    result = calculator.calculate([make_antenna(gain_db=12.0), lna], "1.0", "RX")
    text = format_report(result)
    assert "Cum. Pout" not in text
    assert "System G/T:" in text
    gain_line = next(line for line in text.splitlines() if "Antenna gain (G_ant):" in line)
    assert gain_line.split()[-2:] == ["12", "dB"]


def test_partial_report_has_table_only(calculator, make_active):
    amp = make_active("Amp", gain_db=30.0, op1db_dbm=0.0)
    with pytest.raises(CompressionError) as excinfo:
        calculator.calculate([amp], "1.0", "TX", input_power_dbm=0.0)
    text = format_report(excinfo.value.result)
    assert "(1) Amp" in text
    assert "System summary" not in text
    assert format_stage_table(excinfo.value.result) in text


def test_to_dict(calculator, lna, make_antenna):
    tx = calculator.calculate([lna], "1.0", "TX").to_dict()
    assert tx['direction'] == "TX"
    assert tx['output_p1db_dbm'] == pytest.approx(20.0)
    assert 'g_over_t_dbk' not in tx
    assert tx['stage_powers'][lna.id]['input_dbm'] == -100.0

    rx = calculator.calculate([make_antenna(gain_db=3.0), lna], "1.0", "RX").to_dict()
    assert rx['g_ant_db'] == pytest.approx(3.0)
    assert 'output_p1db_dbm' not in rx
    assert [stage['label'] for stage in rx['stages']] == ["(1) Antenna", "(2) LNA"]
