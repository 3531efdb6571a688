"""Cascade engine: gain, Friis noise figure, compression and G/T of a chain."""

import math
from typing import TYPE_CHECKING, Sequence, Union

from rfcascade.core.constants import DEFAULT_INPUT_POWER_DBM, REFERENCE_TEMPERATURE_K
from rfcascade.core.data_structures import (
    CascadeResult, ComponentCategory, Direction, StagePower, StageResult
)
from rfcascade.core.exceptions import CompressionError, MissingSpecificationError
from rfcascade.core.units import db_to_linear, frequency_key, linear_to_db, mw_to_dbm
from rfcascade.utils.logger import get_logger

if TYPE_CHECKING:
    from rfcascade.design.rf_components import RFComponent

logger = get_logger(__name__)


class LinkBudgetCalculator:
    """
    Walks an ordered chain once, left to right, and budgets gain, noise and
    compression through it.

    The calculator holds no per-run state: every call returns a fresh
    CascadeResult, so repeated runs never see stale stage powers.
    """

    def __init__(self, reference_temperature: float = REFERENCE_TEMPERATURE_K):
        """
        Args:
            reference_temperature: Noise reference temperature in Kelvin,
                also used as the antenna temperature in the G/T budget.
        """
        self.reference_temperature = reference_temperature

    def calculate(self,
                  chain: Sequence["RFComponent"],
                  frequency: Union[str, float],
                  direction: Union[Direction, str] = Direction.FORWARD,
                  input_power_dbm: float = DEFAULT_INPUT_POWER_DBM) -> CascadeResult:
        """
        Run one cascade pass.

        Args:
            chain: Components in signal order for ``direction``.
            frequency: Calculation frequency in GHz.
            direction: Forward (transmit) or reverse (receive).
            input_power_dbm: Power entering the first stage.

        Returns:
            The per-stage table and chain totals.

        Raises:
            ValueError: If the chain is empty.
            MissingSpecificationError: If a stage has no spec for the frequency/direction.
            CompressionError: If a forward stage output exceeds its P1dB. The
                error's ``result`` holds the table up to and including that stage.
        """
        if not chain:
            raise ValueError("Chain contains no components")
        freq = frequency_key(frequency)
        direction = Direction.parse(direction)
        forward = direction is Direction.FORWARD

        result = CascadeResult(frequency=freq, direction=direction, input_power_dbm=input_power_dbm)
        logger.debug(f"*** {direction.value} cascade @ {freq} GHz, Pin = {input_power_dbm:.2f} dBm ***")

        specs = []
        running_pout_dbm = input_power_dbm
        chain_gain_linear = 1.0
        nf_total_linear = 0.0
        nf_gain_linear = 1.0   # gain of the noise-cascaded stages only
        nf_started = False

        for index, comp in enumerate(chain):
            spec = comp.get_spec(freq, direction)
            if spec is None:
                raise MissingSpecificationError(comp, freq, direction)
            specs.append(spec)

            stage_pin_dbm = running_pout_dbm
            running_pout_dbm = stage_pin_dbm + spec.gain_db
            result.stage_powers[comp.id] = StagePower(input_dbm=stage_pin_dbm, output_dbm=running_pout_dbm)
            logger.debug(f"--- (S{index + 1}) {comp.name}: {stage_pin_dbm:.2f} dBm + "
                         f"{spec.gain_db:.2f} dB = {running_pout_dbm:.2f} dBm")

            self._add_to_partition(result, comp.category, spec)

            # Antennas enter the receive cascade through the G/T temperature
            # step; forward they pass with F = 1 so only their gain counts.
            cascaded = forward or nf_started or not comp.is_antenna
            if cascaded:
                stage_f = 1.0 if comp.is_antenna else spec.nf_linear
                if not nf_started:
                    nf_total_linear = stage_f
                    nf_gain_linear = spec.gain_linear
                    nf_started = True
                    logger.debug("    noise cascade starts: F_total = F_stage")
                else:
                    nf_total_linear += (stage_f - 1) / nf_gain_linear
                    nf_gain_linear *= spec.gain_linear
                logger.debug(f"    NF_cum = 10*log10({nf_total_linear:.4f}) = "
                             f"{linear_to_db(nf_total_linear):.2f} dB")
            else:
                logger.debug("    antenna skipped in receive noise cascade")

            chain_gain_linear *= spec.gain_linear

            result.stages.append(StageResult(
                label=f"({index + 1}) {comp.name}",
                component_id=comp.id,
                cumulative_gain_db=linear_to_db(chain_gain_linear),
                cumulative_nf_db=linear_to_db(nf_total_linear) if nf_started else 0.0,
                cumulative_power_dbm=running_pout_dbm
            ))

            if forward and not comp.is_antenna and running_pout_dbm > spec.op1db_dbm:
                error = CompressionError(comp, running_pout_dbm, spec.op1db_dbm, result=result)
                logger.debug(f"    *** {error} ***")
                raise error

        result.total_gain_db = linear_to_db(chain_gain_linear)
        result.total_nf_db = linear_to_db(nf_total_linear) if nf_started else 0.0
        result.final_output_dbm = running_pout_dbm

        if forward:
            result.output_p1db_dbm = self._cascaded_op1db_dbm(chain, specs)
        else:
            self._apply_g_over_t(result, chain, specs)

        result.complete = True
        return result

    @staticmethod
    def _add_to_partition(result: CascadeResult, category: ComponentCategory, spec) -> None:
        """Diagnostic active/passive/antenna gain split. Merged stages contribute their own split."""
        if spec.has_partition:
            result.active_gain_db += spec.active_gain_db
            result.passive_gain_db += spec.passive_gain_db
            result.antenna_gain_db += spec.antenna_gain_db
        elif category.is_passive:
            result.passive_gain_db += spec.gain_db
        elif category.is_antenna:
            result.antenna_gain_db += spec.gain_db
        else:
            result.active_gain_db += spec.gain_db

    @staticmethod
    def _cascaded_op1db_dbm(chain: Sequence["RFComponent"], specs) -> float:
        """Output-referred P1dB of the chain: 1 / sum(1 / (P1dB_i * G_after_i))."""
        gain_after = 1.0
        inverse_sum_mw = 0.0
        for comp, spec in zip(reversed(chain), reversed(specs)):
            if not comp.is_antenna:
                inverse_sum_mw += 1.0 / (spec.op1db_mw * gain_after)
            gain_after *= spec.gain_linear
        total_mw = 1.0 / inverse_sum_mw if inverse_sum_mw > 0 else math.inf
        return mw_to_dbm(total_mw)

    def _apply_g_over_t(self, result: CascadeResult, chain: Sequence["RFComponent"], specs) -> None:
        g_ant_db = 0.0
        for comp, spec in zip(chain, specs):
            if not comp.is_antenna:
                break
            g_ant_db += spec.gain_db

        t_ant = self.reference_temperature
        t_rx = self.reference_temperature * (db_to_linear(result.total_nf_db) - 1)
        t_sys = t_ant + t_rx
        t_sys_dbk = 10 * math.log10(t_sys) if t_sys > 0 else -math.inf

        result.g_ant_db = g_ant_db
        result.t_ant_k = t_ant
        result.t_rx_k = t_rx
        result.t_sys_k = t_sys
        result.g_over_t_dbk = g_ant_db - t_sys_dbk
        logger.debug(f"--- G/T: G_ant {g_ant_db:.2f} dB, T_sys {t_sys:.2f} K, "
                     f"G/T {result.g_over_t_dbk:.2f} dB/K")
