from __future__ import annotations

from typing import get_args

import pytest
from pydantic import ValidationError

from cashbook.models import CATEGORIES, TRANSACTION_TYPES, WALLET_TYPES
from cashbook.models.auth import Credentials
from cashbook.models.expense import Category, ExpenseUpdateIn
from cashbook.models.wallet import TransactionType, WalletType, WalletUpdateIn


def test_literals_match_constants() -> None:
    assert get_args(Category) == CATEGORIES
    assert get_args(WalletType) == WALLET_TYPES
    assert get_args(TransactionType) == TRANSACTION_TYPES


def test_credentials_normalize_email() -> None:
    assert Credentials(email="  Me@Mail.COM", password="x").email == "me@mail.com"
    with pytest.raises(ValidationError):
        Credentials(email="me@localhost", password="x")


def test_partial_updates_need_a_field() -> None:
    with pytest.raises(ValidationError):
        ExpenseUpdateIn()
    with pytest.raises(ValidationError):
        WalletUpdateIn()
    assert ExpenseUpdateIn(description="  ").description is None
    assert WalletUpdateIn(wallet_name=" Savings ").wallet_name == "Savings"
