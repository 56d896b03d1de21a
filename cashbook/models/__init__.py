"""Pydantic domain models for the Cash Book API."""

from .constants import (
    CATEGORIES,
    CATEGORY_LABELS,
    TRANSACTION_TYPES,
    WALLET_TYPES,
)  # re-export
from .expense import ExpenseIn, ExpenseOut, ExpenseUpdateIn
from .budget import BudgetEntryIn, BudgetEntryOut, BudgetEntryUpdateIn
from .wallet import (
    WalletIn,
    WalletOut,
    WalletUpdateIn,
    WalletTransactionIn,
    WalletTransactionOut,
    WalletTransactionUpdateIn,
)
from .profile import ProfileOut, ProfileUpdateIn
from .preferences import UserPreferences

__all__ = [
    "CATEGORIES",
    "CATEGORY_LABELS",
    "TRANSACTION_TYPES",
    "WALLET_TYPES",
    "ExpenseIn",
    "ExpenseOut",
    "ExpenseUpdateIn",
    "BudgetEntryIn",
    "BudgetEntryOut",
    "BudgetEntryUpdateIn",
    "WalletIn",
    "WalletOut",
    "WalletUpdateIn",
    "WalletTransactionIn",
    "WalletTransactionOut",
    "WalletTransactionUpdateIn",
    "ProfileOut",
    "ProfileUpdateIn",
    "UserPreferences",
]
