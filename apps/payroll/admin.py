from django.contrib import admin

from .models import Employee, PayrollEntry


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "company",
        "obra",
        "recurrence_type",
        "monthly_amount",
        "first_half_amount",
        "second_half_amount",
        "weekly_amount",
        "is_active",
    )
    search_fields = ("name", "cpf", "company__name")
    list_filter = ("recurrence_type", "is_active", "company", "obra")
    ordering = ("company__name", "name")
    autocomplete_fields = ("obra",)


@admin.register(PayrollEntry)
class PayrollEntryAdmin(admin.ModelAdmin):
    list_display = (
        "employee_name",
        "company",
        "reference_date",
        "amount",
        "amount_paid",
        "status",
        "recurrence_type",
        "open_ended",
        "group_id",
        "recurrence_index",
        "migrated",
    )
    search_fields = ("employee_name", "cpf", "group_id", "company__name")
    list_filter = ("status", "recurrence_type", "open_ended", "migrated", "company")
    ordering = ("company__name", "-reference_date")
    date_hierarchy = "reference_date"
    readonly_fields = ("bill", "migrated", "created_at", "updated_at")
