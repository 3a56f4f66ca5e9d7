import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from apps.companies.models import Company, Obra


class TimeStampedModel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        # Garantimos que regras cross-model rodem sempre
        self.full_clean()
        return super().save(*args, **kwargs)


class PayoutMethod(models.TextChoices):
    BOLETO = "boleto", "Boleto"
    PIX = "pix", "PIX"
    DEPOSITO = "deposito", "Depósito"
    DINHEIRO = "dinheiro", "Dinheiro"
    TRANSFERENCIA = "transferencia", "Transferência"
    TED = "ted", "TED"
    DOC = "doc", "DOC"
    CARTAO = "cartao", "Cartão"
    OUTRO = "outro", "Outro"


class Bill(TimeStampedModel):
    """
    Conta a pagar. Contas da folha são materializadas a partir do cadastro
    do funcionário e guardam uma cópia dos dados de pagamento do momento
    em que foram geradas.
    """

    class Status(models.TextChoices):
        PENDENTE = "pendente", "Pendente"
        PAGO = "pago", "Pago"
        VENCIDO = "vencido", "Vencido"

    class Types(models.TextChoices):
        BOLETO = "boleto", "Boleto"
        FOLHA = "folha", "Folha de Pagamento"
        EMPREITEIRO = "empreiteiro", "Empreiteiro"
        ESCRITORIO = "escritorio", "Escritório"
        PARTICULAR = "particular", "Particular"
        OUTRO = "outro", "Outro"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="bills",
    )
    obra = models.ForeignKey(
        Obra,
        on_delete=models.SET_NULL,
        related_name="bills",
        null=True,
        blank=True,
        help_text="Centro de custo. Vazio quando a conta não pertence a nenhuma obra.",
    )
    employee = models.ForeignKey(
        "payroll.Employee",
        on_delete=models.SET_NULL,
        related_name="bills",
        null=True,
        blank=True,
    )
    payroll_entry = models.ForeignKey(
        "payroll.PayrollEntry",
        on_delete=models.SET_NULL,
        related_name="bills",
        null=True,
        blank=True,
    )
    type = models.CharField(max_length=20, choices=Types.choices, default=Types.OUTRO)
    description = models.CharField(max_length=255, blank=True)
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    due_date = models.DateField()
    paid_on = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDENTE
    )
    payee = models.CharField(max_length=255, blank=True)
    bank = models.CharField(max_length=100, blank=True)
    agency = models.CharField(max_length=20, blank=True)
    account = models.CharField(max_length=30, blank=True)
    pix_key = models.CharField(max_length=140, blank=True)
    payout_method = models.CharField(
        max_length=20, choices=PayoutMethod.choices, blank=True
    )
    recurrence_group_id = models.CharField(max_length=120, blank=True, db_index=True)
    recurrence_index = models.PositiveIntegerField(null=True, blank=True)
    created_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = "bill"
        ordering = ["due_date", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "due_date"],
                name="uniq_bill_employee_due_date",
                condition=Q(employee__isnull=False),
            )
        ]

    def clean(self):
        super().clean()
        errors = {}
        if self.obra and self.obra.company_id != self.company_id:
            errors["obra"] = "Obra must belong to the same company."
        if self.employee and self.employee.company_id != self.company_id:
            errors["employee"] = "Employee must belong to the same company."
        if self.status == self.Status.PAGO and not self.paid_on:
            errors["paid_on"] = "Informe a data de pagamento de uma conta paga."
        if errors:
            raise ValidationError(errors)

    def __str__(self):
        return f"{self.payee or self.description} - {self.due_date} ({self.get_status_display()})"

    @property
    def is_paid(self) -> bool:
        return self.status == self.Status.PAGO
