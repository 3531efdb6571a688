"""Plain-text rendering of a cascade result."""

from rfcascade.core.data_structures import CascadeResult, Direction

STAGE_WIDTH = 35
VALUE_WIDTH = 15


def _fmt(value: float, digits: int = 2) -> str:
    """Round for display and drop a trailing '.0'."""
    text = f"{round(value, digits):.{digits}f}".rstrip('0').rstrip('.')
    return "0" if text == "-0" else text


def format_stage_table(result: CascadeResult) -> str:
    """Per-stage table. Receive runs omit the power column."""
    forward = result.direction is Direction.FORWARD
    header = "Stage".ljust(STAGE_WIDTH) + " | " + "Cum. Gain (dB)".rjust(VALUE_WIDTH) \
        + " | " + "Cum. NF (dB)".rjust(VALUE_WIDTH)
    if forward:
        header += " | " + "Cum. Pout (dBm)".rjust(VALUE_WIDTH)
    lines = [header, "-" * len(header)]
    for stage in result.stages:
        line = stage.label.ljust(STAGE_WIDTH) + " | " \
            + _fmt(stage.cumulative_gain_db).rjust(VALUE_WIDTH) + " | " \
            + _fmt(stage.cumulative_nf_db).rjust(VALUE_WIDTH)
        if forward:
            line += " | " + _fmt(stage.cumulative_power_dbm).rjust(VALUE_WIDTH)
        lines.append(line)
    return "\n".join(lines)


def format_summary(result: CascadeResult) -> str:
    """System summary: Pout/EIRP for transmit, temperatures and G/T for receive."""
    positive_gain = result.active_gain_db + result.antenna_gain_db
    rule = "=" * 50
    if result.direction is Direction.FORWARD:
        lines = [
            f"--- System summary (TX @ {result.frequency} GHz) ---",
            rule,
            f"  Input power (P_in):          {_fmt(result.input_power_dbm):>8} dBm",
            f"  System gain (G_system):      {_fmt(result.total_gain_db):>8} dB",
            f"  (active/antenna gain):       {_fmt(positive_gain):>8} dB",
            f"  (passive loss):              {_fmt(result.passive_gain_db):>8} dB",
            f"  Cascaded OP1dB:              {_fmt(result.output_p1db_dbm):>8} dBm",
            "  " + "-" * 48,
            f"  Final output (P_out/EIRP):   {_fmt(result.final_output_dbm):>8} dBm",
        ]
    else:
        lines = [
            f"--- System summary (RX G/T @ {result.frequency} GHz) ---",
            rule,
            f"  Antenna gain (G_ant):        {_fmt(result.g_ant_db):>8} dB",
            f"  Antenna temperature (T_ant): {_fmt(result.t_ant_k):>8} K",
            f"  Chain noise figure (NF):     {_fmt(result.total_nf_db):>8} dB",
            f"  Chain gain (G_link):         {_fmt(result.total_gain_db):>8} dB",
            f"    (active/antenna gain):     {_fmt(positive_gain):>8} dB",
            f"    (passive loss):            {_fmt(result.passive_gain_db):>8} dB",
            f"  Receiver temperature (T_rx): {_fmt(result.t_rx_k):>8} K",
            f"  System temperature (T_sys):  {_fmt(result.t_sys_k):>8} K ({_fmt(result.t_sys_dbk)} dBK)",
            "  " + "-" * 48,
            f"  System G/T:                  {_fmt(result.g_over_t_dbk):>8} dB/K",
        ]
    lines.append(rule)
    return "\n".join(lines)


def format_report(result: CascadeResult) -> str:
    """Full report. A partial result (aborted run) gets the stage table only."""
    title = f"--- Cascade analysis (@ {result.frequency} GHz, mode: {result.direction.value}) ---"
    parts = ["=" * 70, title, "=" * 70, format_stage_table(result)]
    if result.complete:
        parts.extend(["", format_summary(result)])
    return "\n".join(parts) + "\n"
