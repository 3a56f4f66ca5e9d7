from django.db import transaction as db_transaction
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from .mixins import ActiveCompanyMixin
from .models import Bill
from .permissions import IsCompanyMember
from .serializers import BillPaymentSerializer, BillSerializer

NO_OBRA = "sem-obra"


class CompanyScopedViewSet(ActiveCompanyMixin, viewsets.ModelViewSet):
    permission_classes = [permissions.IsAuthenticated, IsCompanyMember]
    company_field = "company"

    def get_queryset(self):
        queryset = super().get_queryset()
        company = self.get_active_company()
        return queryset.filter(**{self.company_field: company})

    def perform_create(self, serializer):
        serializer.save(**{self.company_field: self.get_active_company()})

    def get_serializer_context(self):
        context = super().get_serializer_context()
        try:
            context["company"] = self.get_active_company()
        except (ValidationError, PermissionDenied):
            pass
        return context


class BillViewSet(CompanyScopedViewSet):
    """
    Contas a pagar.

    Filtros: `obra` (id ou `sem-obra`), `employee`, `status`, `type`,
    `due_from` e `due_to` (YYYY-MM-DD).
    """

    queryset = Bill.objects.all().select_related("company", "obra", "employee")
    serializer_class = BillSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params

        obra = params.get("obra")
        if obra == NO_OBRA:
            queryset = queryset.filter(obra__isnull=True)
        elif obra:
            queryset = queryset.filter(obra_id=obra)

        for param, lookup in (
            ("employee", "employee_id"),
            ("status", "status"),
            ("type", "type"),
            ("due_from", "due_date__gte"),
            ("due_to", "due_date__lte"),
        ):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{lookup: value})
        return queryset

    def perform_create(self, serializer):
        serializer.save(
            company=self.get_active_company(),
            created_by=str(self.request.user.pk),
        )

    @action(detail=True, methods=["post"], url_path="record-payment")
    def record_payment(self, request, pk=None):
        bill = self.get_object()
        if bill.status == Bill.Status.PAGO:
            raise ValidationError("Esta conta já está paga.")

        serializer = BillPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        update_fields = ["status", "paid_on", "updated_at"]
        with db_transaction.atomic():
            bill.status = Bill.Status.PAGO
            bill.paid_on = data["paid_on"]
            if data.get("payout_method"):
                bill.payout_method = data["payout_method"]
                update_fields.append("payout_method")
            bill.save(update_fields=update_fields)

        return Response(self.get_serializer(bill).data, status=status.HTTP_200_OK)
