# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB Kasir
---------

A Python-based point-of-sale and bookkeeping front end designed for
small shops (warung, toko). All state lives in memory for the duration of
a session and is rebuilt from nothing (or from seed CSV files) on each
load.

Main capabilities:
- product inventory with stock tracking and low-stock alerts,
- a cashier/checkout flow (Kasir) with cash, transfer and card payments,
- purchase recording with automatic product creation and restocking,
- expenses (Beban) by category with paid / unpaid status,
- manual and auto-generated journal entries (Jurnal),
- derived financial reports: income statement, balance sheet, cash flow,
- a dashboard snapshot for the current day and month.

SMB Kasir separates state (store), form validation (services),
computation (reports, journal) and presentation (CLI, views).

Usage:
    python -m smb_kasir.cli --help
"""

__all__ = ["store", "services", "checkout", "reports", "views"]

__version__ = "0.2.0"
