# SMB Forecast - Financial Dashboard & Forecasting for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB Forecast
------------

A Python-based financial dashboard and forecasting engine for small
businesses (restaurants, cafés, quick-service food). It renders historical
monthly income statements and produces a twelve-month forward projection
that can be adjusted with scenario modifications ("hire two cooks", "use
cheaper packaging").

Main capabilities:
- a structured monthly income statement with totals always recomputed
  bottom-up (statement.py),
- baseline assumptions derived from trailing actuals: linear growth
  slopes, cost-to-revenue ratios, fixed-cost averages (baseline.py),
- typed, bounded scenario modifications and an ordered scenario registry
  (modifications.py),
- a deterministic projection engine (projection.py),
- intent resolution contract for language-model or rule-based resolvers
  (resolver.py),
- summaries and statement views for dashboards (summary.py, views.py),
- CSV I/O, seeded sample data and TOML configuration.

SMB Forecast separates computation (engine), configuration (TOML), and
presentation (CLI / Web UI).


Version: 0.1.0

Usage:
    python -m smb_forecast.cli --help
"""

__all__ = ["statement", "baseline", "modifications", "projection", "resolver"]

__version__ = "0.1.0"
