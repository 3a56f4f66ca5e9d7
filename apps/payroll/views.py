from django.conf import settings
from django.db import transaction
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from apps.financials.permissions import CanManagePayroll, IsCompanyMember
from apps.financials.serializers import BillSerializer
from apps.financials.views import CompanyScopedViewSet

from . import reconciler
from .exceptions import StorePermissionDenied
from .ledger import create_recurring_entries, start_open_ended_group, sync_entries_to_bills
from .models import Employee, PayrollEntry, RecurrenceType
from .seeder import seed_open_ended_recurrences
from .serializers import (
    EmployeeSerializer,
    GenerateBillsSerializer,
    PayrollEntrySerializer,
    RecurringEntriesSerializer,
    SeedWindowSerializer,
    SyncBillsSerializer,
)
from .stores import DjangoBillStore, DjangoPayrollEntryStore


class PayrollViewSet(CompanyScopedViewSet):
    permission_classes = [permissions.IsAuthenticated, IsCompanyMember, CanManagePayroll]

    def handle_exception(self, exc):
        if isinstance(exc, StorePermissionDenied):
            exc = PermissionDenied(exc.message, code=exc.code)
        return super().handle_exception(exc)

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if "company" in context:
            context["membership"] = self.get_active_membership()
            context["created_by"] = str(self.request.user.pk)
        return context

    def bill_store(self):
        return DjangoBillStore(self.get_active_company(), self.get_active_membership())

    def entry_store(self):
        return DjangoPayrollEntryStore(self.get_active_company(), self.get_active_membership())


class EmployeeViewSet(PayrollViewSet):
    queryset = Employee.objects.all().select_related("company", "obra")
    serializer_class = EmployeeSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        if params.get("recurrence_type"):
            queryset = queryset.filter(recurrence_type=params["recurrence_type"])
        if params.get("is_active") in ("true", "false"):
            queryset = queryset.filter(is_active=params["is_active"] == "true")
        return queryset

    def perform_create(self, serializer):
        super().perform_create(serializer)
        self.generation = getattr(serializer, "generation", None)

    def perform_update(self, serializer):
        super().perform_update(serializer)
        self.generation = getattr(serializer, "generation", None)

    def create(self, request, *args, **kwargs):
        self.generation = None
        response = super().create(request, *args, **kwargs)
        return self._with_generation(response)

    def update(self, request, *args, **kwargs):
        self.generation = None
        response = super().update(request, *args, **kwargs)
        return self._with_generation(response)

    def _with_generation(self, response):
        # Contagem de contas criadas/ignoradas/com falha na regeneração.
        if self.generation is not None:
            response.data["generation"] = self.generation.as_dict()
        return response

    def perform_destroy(self, instance):
        # Contas pagas ficam como histórico (employee vira NULL).
        with transaction.atomic():
            self.bill_store().delete_unpaid_by_employee(instance.id)
            instance.delete()

    @action(detail=True, methods=["post"], url_path="generate-bills")
    def generate_bills(self, request, pk=None):
        employee = self.get_object()
        serializer = GenerateBillsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = reconciler.generate_bills(
            employee,
            self.bill_store(),
            created_by=str(request.user.pk),
            replace_future=data["replace_future"],
            months_past=min(data["months_past"], settings.PAYROLL_MAX_PAST_MONTHS),
        )
        return Response(result.as_dict(), status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="extend-back")
    def extend_back(self, request, pk=None):
        employee = self.get_object()
        result = reconciler.extend_one_period_back(
            employee,
            self.bill_store(),
            created_by=str(request.user.pk),
        )
        return Response(result.as_dict(), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="bills")
    def bills(self, request, pk=None):
        employee = self.get_object()
        queryset = employee.bills.filter(company=self.get_active_company()).select_related("obra")
        return Response(BillSerializer(queryset, many=True).data)


class PayrollEntryViewSet(PayrollViewSet):
    queryset = PayrollEntry.objects.all().select_related("company")
    serializer_class = PayrollEntrySerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        for param, lookup in (
            ("status", "status"),
            ("group_id", "group_id"),
            ("date_from", "reference_date__gte"),
            ("date_to", "reference_date__lte"),
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

    @action(detail=False, methods=["post"], url_path="recurring")
    def recurring(self, request):
        serializer = RecurringEntriesSerializer(
            data=request.data, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)
        base = dict(serializer.validated_data)
        tipo = base.pop("recurrence_type")
        total = base.pop("total")
        second_amount = base.pop("second_amount", None)
        interval_days = base.pop("interval_days", None)
        business_day = base.pop("business_day", None)
        second_day = base.pop("second_day", None)
        base.pop("open_ended", None)
        base["created_by"] = str(request.user.pk)

        store = self.entry_store()
        with transaction.atomic():
            if tipo in (RecurrenceType.MENSAL, RecurrenceType.QUINZENAL):
                ids = start_open_ended_group(
                    store,
                    base,
                    recurrence_type=tipo,
                    business_day=business_day,
                    second_day=second_day,
                    second_amount=second_amount,
                )
            else:
                ids = create_recurring_entries(
                    store,
                    base,
                    recurrence_type=tipo,
                    total=total,
                    interval_days=interval_days,
                )

        entries = PayrollEntry.objects.filter(pk__in=ids).order_by("reference_date")
        return Response(
            PayrollEntrySerializer(entries, many=True).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["post"], url_path="seed")
    def seed(self, request):
        serializer = SeedWindowSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = seed_open_ended_recurrences(
            self.entry_store(),
            serializer.validated_data["date_from"],
            serializer.validated_data["date_to"],
        )
        return Response(result.as_dict(), status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="sync-bills")
    def sync_bills(self, request):
        serializer = SyncBillsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            result = sync_entries_to_bills(
                self.entry_store(),
                self.bill_store(),
                created_by=str(request.user.pk),
                limit=serializer.validated_data["limit"],
            )
        return Response(result.as_dict(), status=status.HTTP_200_OK)
