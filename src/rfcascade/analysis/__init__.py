"""Cascade analysis and reporting."""

from rfcascade.analysis.link_budget import LinkBudgetCalculator
from rfcascade.analysis.report import format_report

__all__ = ['LinkBudgetCalculator', 'format_report']
