from django.db import transaction
from rest_framework import serializers

from apps.companies.models import Obra
from apps.financials.serializers import CompanyScopedModelSerializer

from .models import Employee, PayrollEntry, RecurrenceType
from .reconciler import generate_bills
from .stores import DjangoBillStore

# Campos que mudam os vencimentos gerados.
SCHEDULE_FIELDS = {
    "recurrence_type",
    "business_day",
    "second_day",
    "day_of_month",
    "interval_days",
    "monthly_amount",
    "first_half_amount",
    "second_half_amount",
    "weekly_amount",
    "one_off_amount",
    "one_off_date",
    "is_active",
    "obra",
    "bank",
    "agency",
    "account",
    "pix_key",
    "payout_method",
}

REQUIRED_BY_TYPE = {
    RecurrenceType.AVULSO: ("one_off_amount", "one_off_date"),
    RecurrenceType.MENSAL: ("monthly_amount",),
    RecurrenceType.QUINZENAL: ("first_half_amount", "second_half_amount"),
    RecurrenceType.SEMANAL: ("weekly_amount",),
    RecurrenceType.PERSONALIZADO: ("weekly_amount", "interval_days"),
}


class EmployeeSerializer(CompanyScopedModelSerializer):
    company_filtered_fields = ("obra",)
    company_name = serializers.CharField(source="company.name", read_only=True)
    obra = serializers.PrimaryKeyRelatedField(
        queryset=Obra.objects.all(), required=False, allow_null=True
    )
    obra_name = serializers.CharField(source="obra.name", read_only=True, allow_null=True)

    class Meta:
        model = Employee
        fields = (
            "id",
            "company",
            "company_name",
            "obra",
            "obra_name",
            "name",
            "cpf",
            "bank",
            "agency",
            "account",
            "pix_key",
            "payout_method",
            "category",
            "recurrence_type",
            "business_day",
            "second_day",
            "day_of_month",
            "interval_days",
            "monthly_amount",
            "first_half_amount",
            "second_half_amount",
            "weekly_amount",
            "one_off_amount",
            "one_off_date",
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "company",
            "company_name",
            "obra_name",
            "created_by",
            "created_at",
            "updated_at",
        )

    def validate(self, attrs):
        attrs = super().validate(attrs)
        tipo = attrs.get("recurrence_type", getattr(self.instance, "recurrence_type", None))
        errors = {}
        for field_name in REQUIRED_BY_TYPE.get(tipo, ()):
            value = attrs.get(field_name, getattr(self.instance, field_name, None))
            if value in (None, ""):
                errors[field_name] = "Campo obrigatório para este tipo de recorrência."
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def _generate_bills(self, instance: Employee, *, replace_future: bool = False):
        store = DjangoBillStore(instance.company, self.context.get("membership"))
        return generate_bills(
            instance,
            store,
            created_by=self.context.get("created_by", ""),
            replace_future=replace_future,
        )

    def create(self, validated_data):
        company = self.context.get("company")
        if company:
            validated_data["company"] = company
        validated_data.setdefault("created_by", self.context.get("created_by", ""))
        with transaction.atomic():
            instance = super().create(validated_data)
            self.generation = self._generate_bills(instance)
        return instance

    def update(self, instance, validated_data):
        should_regen = any(field in validated_data for field in SCHEDULE_FIELDS)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if should_regen:
                self.generation = self._generate_bills(instance, replace_future=True)
        return instance


class GenerateBillsSerializer(serializers.Serializer):
    months_past = serializers.IntegerField(required=False, min_value=0, default=0)
    replace_future = serializers.BooleanField(required=False, default=False)


class PayrollEntrySerializer(CompanyScopedModelSerializer):
    company_name = serializers.CharField(source="company.name", read_only=True)

    class Meta:
        model = PayrollEntry
        fields = (
            "id",
            "company",
            "company_name",
            "employee_name",
            "cpf",
            "bank",
            "agency",
            "account",
            "amount",
            "amount_paid",
            "status",
            "payout_method",
            "category",
            "recurrence_type",
            "interval_days",
            "open_ended",
            "business_day",
            "second_day",
            "group_id",
            "recurrence_index",
            "recurrence_total",
            "reference_date",
            "paid_on",
            "notes",
            "bill",
            "migrated",
            "created_by",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "company",
            "company_name",
            "group_id",
            "recurrence_index",
            "recurrence_total",
            "bill",
            "migrated",
            "created_by",
            "created_at",
            "updated_at",
        )

    def validate(self, attrs):
        attrs = super().validate(attrs)
        status = attrs.get("status", getattr(self.instance, "status", PayrollEntry.Status.ABERTO))
        if status == PayrollEntry.Status.ABERTO:
            attrs["paid_on"] = None
        elif not attrs.get("paid_on", getattr(self.instance, "paid_on", None)):
            raise serializers.ValidationError(
                {"paid_on": "Informe a data de pagamento."}
            )
        if attrs.get("amount") is not None and attrs["amount"] <= 0:
            raise serializers.ValidationError({"amount": "Amount must be greater than zero."})
        return attrs


class RecurringEntriesSerializer(PayrollEntrySerializer):
    """Lançamento base + parâmetros do grupo de recorrência."""

    total = serializers.IntegerField(required=False, min_value=2, max_value=60, default=2)
    second_amount = serializers.DecimalField(
        max_digits=15, decimal_places=2, required=False, allow_null=True
    )

    class Meta(PayrollEntrySerializer.Meta):
        fields = PayrollEntrySerializer.Meta.fields + ("total", "second_amount")

    def validate(self, attrs):
        attrs = super().validate(attrs)
        tipo = attrs.get("recurrence_type")
        if not tipo or tipo == RecurrenceType.AVULSO:
            raise serializers.ValidationError(
                {"recurrence_type": "Informe um tipo de recorrência."}
            )
        if tipo == RecurrenceType.PERSONALIZADO and not attrs.get("interval_days"):
            raise serializers.ValidationError(
                {"interval_days": "Informe o intervalo em dias da recorrência personalizada."}
            )
        return attrs


class SeedWindowSerializer(serializers.Serializer):
    date_from = serializers.DateField()
    date_to = serializers.DateField()

    def validate(self, attrs):
        if attrs["date_from"] > attrs["date_to"]:
            raise serializers.ValidationError({"date_to": "Data final anterior à inicial."})
        return attrs


class SyncBillsSerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=800, default=300)
