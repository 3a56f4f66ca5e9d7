from rest_framework import serializers

from apps.companies.models import Obra

from .models import Bill


class CompanyContextMixin:
    company_filtered_fields: tuple[str, ...] = ()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        company = self.context.get("company")
        if not company:
            return
        for field_name in self.company_filtered_fields:
            field = self.fields.get(field_name)
            if not field:
                continue
            queryset = getattr(field, "queryset", None)
            if queryset is None:
                continue
            self.fields[field_name].queryset = queryset.filter(company=company)


class CompanyScopedModelSerializer(CompanyContextMixin, serializers.ModelSerializer):
    pass


class BillSerializer(CompanyScopedModelSerializer):
    company_filtered_fields = ("obra",)
    company_name = serializers.CharField(source="company.name", read_only=True)
    obra = serializers.PrimaryKeyRelatedField(
        queryset=Obra.objects.all(), required=False, allow_null=True
    )
    obra_name = serializers.CharField(source="obra.name", read_only=True, allow_null=True)
    employee_name = serializers.CharField(source="employee.name", read_only=True, allow_null=True)

    class Meta:
        model = Bill
        fields = (
            "id",
            "company",
            "company_name",
            "obra",
            "obra_name",
            "employee",
            "employee_name",
            "payroll_entry",
            "type",
            "description",
            "amount",
            "due_date",
            "paid_on",
            "status",
            "payee",
            "bank",
            "agency",
            "account",
            "pix_key",
            "payout_method",
            "recurrence_group_id",
            "recurrence_index",
            "created_by",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "company",
            "company_name",
            "obra_name",
            "employee",
            "employee_name",
            "payroll_entry",
            "recurrence_group_id",
            "recurrence_index",
            "created_by",
            "created_at",
            "updated_at",
        )

    def validate(self, attrs):
        attrs = super().validate(attrs)
        status = attrs.get("status", getattr(self.instance, "status", None))
        paid_on = attrs.get("paid_on", getattr(self.instance, "paid_on", None))
        if status == Bill.Status.PAGO and not paid_on:
            raise serializers.ValidationError(
                {"paid_on": "Informe a data de pagamento de uma conta paga."}
            )
        if attrs.get("amount") is not None and attrs["amount"] <= 0:
            raise serializers.ValidationError({"amount": "Amount must be greater than zero."})
        return attrs


class BillPaymentSerializer(serializers.Serializer):
    paid_on = serializers.DateField()
    payout_method = serializers.ChoiceField(
        choices=Bill._meta.get_field("payout_method").choices,
        required=False,
        allow_blank=True,
    )
