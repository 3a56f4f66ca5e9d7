from django.contrib import admin

from .models import Company, Membership, Obra


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "cnpj", "email", "created_at")
    search_fields = ("name", "cnpj", "email")
    readonly_fields = ("created_at", "updated_at")
    date_hierarchy = "created_at"
    ordering = ("-created_at",)


@admin.register(Obra)
class ObraAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "company", "status", "created_at")
    search_fields = ("code", "name", "company__name")
    list_filter = ("status", "company")
    readonly_fields = ("code", "created_at", "updated_at")
    ordering = ("company__name", "code")


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "company", "role", "obra", "created_at")
    search_fields = ("user__username", "user__email", "company__name")
    list_filter = ("role", "company")
    autocomplete_fields = ("obra",)
