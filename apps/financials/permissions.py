from rest_framework import permissions

from apps.payroll.exceptions import PERMISSION_DENIED_MESSAGE


class IsCompanyMember(permissions.BasePermission):
    """
    Ensures requests include an active company and that the user belongs to it.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        # get_active_company raises ValidationError or PermissionDenied with useful messages.
        view.get_active_company()
        return True


class CanManagePayroll(permissions.BasePermission):
    """
    Leitura liberada a qualquer membro; escrita apenas para Admin,
    Financeiro ou Secretaria.
    """

    message = PERMISSION_DENIED_MESSAGE

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return view.get_active_membership().can_manage_payroll
