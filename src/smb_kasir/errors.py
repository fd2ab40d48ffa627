# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised by SMB Kasir.

All of them derive from ValueError so that callers which only care about
"bad input" can keep catching ValueError, as the rest of the code base does.
"""


class ValidationError(ValueError):
    """A form is incomplete or contains invalid values."""


class RecordNotFoundError(ValueError):
    """No record with the requested id exists in the store."""


class StockError(ValidationError):
    """The requested quantity exceeds the available stock."""


class PaymentError(ValidationError):
    """The payment does not cover the amount due."""


class UnbalancedJournalError(ValidationError):
    """Total debit and total credit of a journal entry differ."""
