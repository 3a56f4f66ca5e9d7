from django.contrib import admin

from .models import Bill


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = (
        "description",
        "company",
        "type",
        "obra",
        "employee",
        "payee",
        "amount",
        "due_date",
        "status",
        "paid_on",
        "recurrence_index",
    )
    search_fields = ("description", "payee", "company__name", "employee__name", "recurrence_group_id")
    list_filter = ("status", "type", "company", "obra")
    ordering = ("company__name", "due_date")
    date_hierarchy = "due_date"
    autocomplete_fields = ("obra", "employee")
    readonly_fields = ("recurrence_group_id", "recurrence_index", "created_by", "created_at", "updated_at")
