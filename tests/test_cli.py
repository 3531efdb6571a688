"""Tests for the rfcascade-calc command line tool."""

import logging

import pytest
import yaml

from rfcascade.cli.calculator import EXIT_COMPRESSED, EXIT_ERROR, main
from rfcascade.utils.logger import CALCULATION_TRACE_LOGGER


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    trace = logging.getLogger(CALCULATION_TRACE_LOGGER)
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    trace.handlers.clear()
    trace.setLevel(logging.NOTSET)
    trace.propagate = True


@pytest.fixture
def design_file(tmp_path):
    config = {
        'name': "CLI chain",
        'calculation': {'frequency': 1.0, 'direction': "TX", 'input_power_dbm': -40.0},
        'components': [
            {'id': "lna", 'template': "lna"},
            {'id': "pa", 'template': "pa"},
            {'id': "ant", 'template': "antenna"},
        ],
        'connections': {
            'TX': [["lna", "pa", "ant"]],
            'RX': [["ant", "lna"]],
        },
    }
    path = tmp_path / "design.yaml"
    path.write_text(yaml.safe_dump(config))
    return str(path)


def test_transmit_report(design_file, capsys):
    main(["-d", design_file])
    out = capsys.readouterr().out
    assert "mode: TX" in out
    assert "(3) Antenna" in out


def test_flags_override_calculation_section(design_file, capsys):
    main(["-d", design_file, "--direction", "rx", "-f", "1"])
    out = capsys.readouterr().out
    assert "mode: RX" in out
    assert "System G/T:" in out


def test_yaml_output(design_file, tmp_path, capsys):
    out_path = tmp_path / "result.yaml"
    main(["-d", design_file, "-o", str(out_path)])
    data = yaml.safe_load(out_path.read_text())
    assert data['complete'] is True
    assert data['final_output_dbm'] == pytest.approx(-40.0 + 15.0 + 20.0 + 12.0)


def test_compression_exit_code(design_file, tmp_path, capsys):
    out_path = tmp_path / "partial.yaml"
    with pytest.raises(SystemExit) as excinfo:
        main(["-d", design_file, "--input-power", "10", "-o", str(out_path)])
    assert excinfo.value.code == EXIT_COMPRESSED
    out = capsys.readouterr().out
    assert "CALCULATION STOPPED" in out
    assert "'LNA' is compressed" in out
    assert yaml.safe_load(out_path.read_text())['complete'] is False


def test_missing_design_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["-d", str(tmp_path / "absent.yaml")])
    assert excinfo.value.code == EXIT_ERROR


def test_missing_frequency(design_file):
    with pytest.raises(SystemExit) as excinfo:
        main(["-d", design_file, "-f", "9.5"])
    assert excinfo.value.code == EXIT_ERROR


def test_calculation_trace(design_file, capsys):
    main(["-d", design_file, "--trace"])
    err = capsys.readouterr().err
    assert "TX cascade @ 1.0 GHz" in err
    assert "NF_cum" in err
