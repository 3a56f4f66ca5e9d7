from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.companies.models import Company, Membership


class ActiveCompanyMixin:
    """
    Resolve the active company from the X-Company-ID header (or request data)
    and enforce membership on every request.
    """

    def get_active_company(self) -> Company:
        return self.get_active_membership().company

    def get_active_membership(self) -> Membership:
        if hasattr(self.request, "_cached_active_membership"):
            return self.request._cached_active_membership

        user = self.request.user
        if not user or not user.is_authenticated:
            raise PermissionDenied("Authentication required.")

        company_id = (
            self.request.headers.get("X-Company-ID")
            or self.request.query_params.get("company_id")
        )

        if not company_id:
            # Fallback: pick the first membership as a default.
            membership = Membership.objects.filter(user=user).select_related("company").first()
            if not membership:
                raise ValidationError(
                    "Active company not provided. Use the X-Company-ID header or ensure user has a membership."
                )
        else:
            if not Company.objects.filter(pk=company_id).exists():
                raise ValidationError("Company not found.")
            membership = (
                Membership.objects.filter(company_id=company_id, user=user)
                .select_related("company")
                .first()
            )
            if not membership:
                raise PermissionDenied("You do not belong to this company.")

        self.request._cached_active_membership = membership
        return membership
