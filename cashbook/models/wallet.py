from __future__ import annotations

from datetime import date as Date, datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import MAX_AMOUNT
from .expense import _blank_to_none

WalletType = Literal["bank", "bkash", "nagad", "rocket", "custom"]
TransactionType = Literal["deposit", "withdraw"]


class WalletIn(BaseModel):
    wallet_type: WalletType
    wallet_name: str
    initial_balance: float = Field(0, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)

    @field_validator("wallet_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("wallet_name cannot be empty")
        return value.strip()


class WalletOut(WalletIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class WalletUpdateIn(BaseModel):
    wallet_name: Optional[str] = None
    initial_balance: Optional[float] = Field(None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)

    @field_validator("wallet_name")
    @classmethod
    def _name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("wallet_name cannot be empty")
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def _at_least_one(self) -> "WalletUpdateIn":
        if self.wallet_name is None and self.initial_balance is None:
            raise ValueError("at least one field must be provided")
        return self


class WalletTransactionIn(BaseModel):
    wallet_id: str
    transaction_type: TransactionType
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    transaction_date: Date

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class WalletTransactionOut(WalletTransactionIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class WalletTransactionUpdateIn(BaseModel):
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    transaction_date: Optional[Date] = None

    @field_validator("description")
    @classmethod
    def _description(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _at_least_one(self) -> "WalletTransactionUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self


class LedgerEntryOut(BaseModel):
    id: str
    wallet_id: str
    transaction_type: TransactionType
    amount: float
    description: Optional[str] = None
    transaction_date: Date
    is_initial_balance: bool = False


class WalletSummaryOut(BaseModel):
    balances: Dict[str, float]
    total_deposit: float
    total_withdraw: float
    total_balance: float
