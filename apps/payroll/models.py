from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from apps.companies.models import Company, Obra
from apps.financials.models import PayoutMethod, TimeStampedModel

from .recurrence import Biweekly, CustomInterval, Monthly, OneOff, Weekly, clamp
from .types import UNASSIGNED, Assigned


class RecurrenceType(models.TextChoices):
    AVULSO = "avulso", "Avulso"
    MENSAL = "mensal", "Mensal"
    QUINZENAL = "quinzenal", "Quinzenal"
    SEMANAL = "semanal", "Semanal"
    PERSONALIZADO = "personalizado", "Personalizado"


DEFAULT_BUSINESS_DAY = 5
DEFAULT_SECOND_DAY = 20
DEFAULT_DAY_OF_MONTH = 20


class Employee(TimeStampedModel):
    """
    Cadastro de funcionário da folha. Funciona como modelo de recorrência:
    as contas a pagar são geradas a partir dele.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="employees",
    )
    obra = models.ForeignKey(
        Obra,
        on_delete=models.SET_NULL,
        related_name="employees",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=255)
    cpf = models.CharField(max_length=14, blank=True)
    bank = models.CharField(max_length=100, blank=True)
    agency = models.CharField(max_length=20, blank=True)
    account = models.CharField(max_length=30, blank=True)
    pix_key = models.CharField(max_length=140, blank=True)
    payout_method = models.CharField(
        max_length=20, choices=PayoutMethod.choices, blank=True
    )
    category = models.CharField(max_length=100, blank=True)
    recurrence_type = models.CharField(
        max_length=20, choices=RecurrenceType.choices, default=RecurrenceType.MENSAL
    )
    business_day = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(22)],
        help_text="N-ésimo dia útil do mês (1ª quinzena).",
    )
    second_day = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Dia do mês da 2ª quinzena.",
    )
    day_of_month = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(31)],
        help_text="Dia do vencimento mensal.",
    )
    interval_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )
    monthly_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    first_half_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    second_half_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    weekly_amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Valor por ocorrência (semanal ou personalizado).",
    )
    one_off_amount = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    one_off_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.CharField(max_length=150, blank=True)
    last_recurrence_index = models.PositiveIntegerField(
        default=0,
        editable=False,
        help_text="Maior número de recorrência já usado; não volta atrás quando contas são excluídas.",
    )

    class Meta:
        db_table = "payroll_employee"
        ordering = ["company__name", "name"]

    def clean(self):
        super().clean()
        errors = {}
        if self.obra and self.obra.company_id != self.company_id:
            errors["obra"] = "Obra must belong to the same company."
        if self.recurrence_type == RecurrenceType.PERSONALIZADO and not self.interval_days:
            errors["interval_days"] = "Informe o intervalo em dias da recorrência personalizada."
        if self.recurrence_type == RecurrenceType.AVULSO and not self.one_off_date:
            errors["one_off_date"] = "Informe a data do pagamento avulso."
        if errors:
            raise ValidationError(errors)

    def __str__(self):
        return f"{self.name} ({self.get_recurrence_type_display()})"

    @property
    def cost_center(self):
        if self.obra_id:
            return Assigned(self.obra_id)
        return UNASSIGNED

    def schedule(self):
        """Monta a regra de recorrência com apenas os campos do tipo escolhido."""
        tipo = self.recurrence_type
        if tipo == RecurrenceType.AVULSO:
            return OneOff(amount=self.one_off_amount or 0, due_date=self.one_off_date)
        if tipo == RecurrenceType.MENSAL:
            return Monthly(
                amount=self.monthly_amount or 0,
                day_of_month=clamp(self.day_of_month or DEFAULT_DAY_OF_MONTH, 1, 31),
            )
        if tipo == RecurrenceType.QUINZENAL:
            return Biweekly(
                first_amount=self.first_half_amount or 0,
                second_amount=self.second_half_amount or 0,
                business_day=clamp(self.business_day or DEFAULT_BUSINESS_DAY, 1, 22),
                second_day=clamp(self.second_day or DEFAULT_SECOND_DAY, 1, 31),
            )
        if tipo == RecurrenceType.SEMANAL:
            return Weekly(amount=self.weekly_amount or 0)
        if tipo == RecurrenceType.PERSONALIZADO:
            return CustomInterval(
                amount=self.weekly_amount or 0,
                interval_days=max(1, self.interval_days or 1),
            )
        return None


class PayrollEntry(TimeStampedModel):
    """
    Lançamento da folha de pagamento (livro paralelo às contas a pagar).
    Lançamentos de um mesmo grupo de recorrência compartilham `group_id`
    e são numerados por `recurrence_index`.
    """

    class Status(models.TextChoices):
        ABERTO = "aberto", "Aberto"
        PARCIAL = "parcial", "Parcial"
        PAGO = "pago", "Pago"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="payroll_entries",
    )
    employee_name = models.CharField(max_length=255)
    cpf = models.CharField(max_length=14, blank=True)
    bank = models.CharField(max_length=100, blank=True)
    agency = models.CharField(max_length=20, blank=True)
    account = models.CharField(max_length=30, blank=True)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ABERTO)
    payout_method = models.CharField(
        max_length=20, choices=PayoutMethod.choices, blank=True
    )
    category = models.CharField(max_length=100, blank=True)
    recurrence_type = models.CharField(
        max_length=20, choices=RecurrenceType.choices, blank=True
    )
    interval_days = models.PositiveIntegerField(null=True, blank=True)
    open_ended = models.BooleanField(
        default=False,
        help_text="Recorrência por tempo indeterminado.",
    )
    business_day = models.PositiveSmallIntegerField(null=True, blank=True)
    second_day = models.PositiveSmallIntegerField(null=True, blank=True)
    group_id = models.CharField(max_length=120, blank=True, db_index=True)
    recurrence_index = models.PositiveIntegerField(null=True, blank=True)
    recurrence_total = models.PositiveIntegerField(null=True, blank=True)
    reference_date = models.DateField()
    paid_on = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    bill = models.ForeignKey(
        "financials.Bill",
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
        help_text="Conta a pagar criada a partir deste lançamento.",
    )
    migrated = models.BooleanField(
        default=False,
        help_text="Já copiado para contas a pagar; não recriar mesmo se a conta for excluída.",
    )
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "payroll_entry"
        ordering = ["-reference_date", "employee_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "group_id", "reference_date"],
                name="uniq_payroll_entry_group_date",
                condition=~Q(group_id=""),
            )
        ]

    def __str__(self):
        return f"{self.employee_name} - {self.reference_date} ({self.get_status_display()})"
