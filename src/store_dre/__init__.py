# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Store DRE
---------

A Python reporting engine that consolidates the daily cash closings of a
multi-store retail organization into income-statement style reports
(DRE - Demonstrativo de Resultado do Exercício).

Main capabilities:
- closing totals derived from categorized movements (revenue net of
  discount, expense, other),
- DRE reports per store with a consolidated row, for any date window,
- month-over-month comparison with a well-defined zero-baseline convention,
- lifetime store rankings,
- monthly revenue goals with progress tracking,
- efficiency indicators and payment method breakdowns,
- memoized reporting bound to an immutable snapshot,
- a thin command-line interface over CSV snapshots and a TOML config.

Version: 0.1.0

Usage:
    python -m store_dre.cli --help
"""

__all__ = [
    "categories",
    "totals",
    "dre",
    "comparison",
    "rankings",
    "goals",
    "insights",
    "service",
    "views",
    "io",
]

__version__ = "0.1.0"
