"""Domain constants and enumerations for validation."""

from typing import Dict, Tuple

CATEGORIES: Tuple[str, ...] = (
    "food",
    "transport",
    "shopping",
    "bills",
    "health",
    "education",
    "entertainment",
    "other",
)

CATEGORY_LABELS: Dict[str, str] = {
    "food": "Food",
    "transport": "Transport",
    "shopping": "Shopping",
    "bills": "Bills",
    "health": "Health",
    "education": "Education",
    "entertainment": "Entertainment",
    "other": "Other",
}

WALLET_TYPES: Tuple[str, ...] = ("bank", "bkash", "nagad", "rocket", "custom")

WALLET_TYPE_LABELS: Dict[str, str] = {
    "bank": "Bank",
    "bkash": "bKash",
    "nagad": "Nagad",
    "rocket": "Rocket",
    "custom": "Custom",
}

TRANSACTION_TYPES: Tuple[str, ...] = ("deposit", "withdraw")

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Upper bound for any single amount, budget limit or opening balance
MAX_AMOUNT = 1_000_000_000_000
