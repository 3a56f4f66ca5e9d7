from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Assigned:
    """Conta vinculada a uma obra (centro de custo)."""

    obra_id: Any


class Unassigned:
    """Conta sem obra. Continua aparecendo na listagem geral de contas a pagar."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNASSIGNED"

    def __bool__(self):
        return False


UNASSIGNED = Unassigned()


@dataclass(frozen=True)
class DueDate:
    due_date: date
    amount: Decimal


@dataclass(frozen=True)
class PayoutSnapshot:
    """Dados de pagamento copiados do cadastro no momento da geração."""

    payee: str = ""
    bank: str = ""
    agency: str = ""
    account: str = ""
    pix_key: str = ""
    payout_method: str = ""


@dataclass(frozen=True)
class ExistingRecord:
    """Visão mínima de uma conta (ou lançamento) já materializada."""

    id: Any
    group_key: str
    due_date: date
    status: str = ""
    recurrence_index: int | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == "pago"


@dataclass
class NewBill:
    amount: Decimal
    due_date: date
    employee_id: Any = None
    payroll_entry_id: Any = None
    cost_center: Any = UNASSIGNED
    payout: PayoutSnapshot = field(default_factory=PayoutSnapshot)
    type: str = "folha"
    description: str = ""
    status: str = "pendente"
    paid_on: date | None = None
    group_id: str = ""
    recurrence_index: int | None = None
    created_by: str = ""
