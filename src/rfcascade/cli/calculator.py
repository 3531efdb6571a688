#!/usr/bin/env python3
"""
Command-line interface for running rfcascade budget calculations.
"""

import argparse
import logging
import sys
import yaml

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.analysis.report import format_report, format_stage_table
from rfcascade.core.constants import (
    DEFAULT_FREQUENCY, DEFAULT_INPUT_POWER_DBM, REFERENCE_TEMPERATURE_K
)
from rfcascade.core.exceptions import CompressionError
from rfcascade.design.design_builder import build_design_from_config
from rfcascade.utils.config_loader import load_config
from rfcascade.utils.logger import enable_calculation_trace, setup_logging

EXIT_ERROR = 1
EXIT_COMPRESSED = 2


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="rfcascade RF chain budget calculator")

    parser.add_argument(
        "-d", "--design",
        required=True,
        help="Path to design file (YAML or JSON)"
    )

    parser.add_argument(
        "-f", "--frequency",
        help="Calculation frequency in GHz (overrides the design file)"
    )

    parser.add_argument(
        "--direction",
        choices=["TX", "RX"],
        type=str.upper,
        help="Signal direction (overrides the design file)"
    )

    parser.add_argument(
        "--input-power",
        type=float,
        help="Input power in dBm (overrides the design file)"
    )

    parser.add_argument(
        "-o", "--output",
        help="Write the result as YAML to this file"
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the step-by-step calculation log to stderr"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set the logging level"
    )

    return parser.parse_args(argv)


def _write_result(path, result):
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(result.to_dict(), f, sort_keys=False)
    logging.info(f"Results saved to: {path}")


def main(argv=None):
    """Main entry point for the rfcascade calculator CLI."""
    args = parse_args(argv)

    # Log to stderr so the report on stdout stays clean
    log_level = getattr(logging, args.log_level)
    setup_logging(level=log_level, stream=sys.stderr)
    if args.trace:
        enable_calculation_trace(sys.stderr)

    try:
        config = load_config(args.design)
        design = build_design_from_config(config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logging.error(f"Failed to load design: {e}")
        sys.exit(EXIT_ERROR)

    calc_config = config.get('calculation') or {}
    frequency = args.frequency or calc_config.get('frequency', DEFAULT_FREQUENCY)
    direction = args.direction or calc_config.get('direction', 'TX')
    input_power = args.input_power
    if input_power is None:
        input_power = float(calc_config.get('input_power_dbm', DEFAULT_INPUT_POWER_DBM))

    calculator = LinkBudgetCalculator(
        reference_temperature=float(calc_config.get("reference_temperature", REFERENCE_TEMPERATURE_K))
    )

    try:
        logging.info(f"Calculating '{design.name}' at {frequency} GHz ({direction})")
        result = design.calculate(frequency, direction, input_power, calculator=calculator)
    except CompressionError as e:
        if e.result is not None:
            print(format_stage_table(e.result))
        print(f"\nCALCULATION STOPPED: {e}")
        if args.output and e.result is not None:
            _write_result(args.output, e.result)
        sys.exit(EXIT_COMPRESSED)
    except ValueError as e:
        logging.error(f"Calculation failed: {e}")
        sys.exit(EXIT_ERROR)

    print(format_report(result), end="")
    if args.output:
        _write_result(args.output, result)


if __name__ == "__main__":
    main()
