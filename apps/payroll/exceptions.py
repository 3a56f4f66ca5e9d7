PERMISSION_DENIED_CODE = "permission-denied"

PERMISSION_DENIED_MESSAGE = (
    "Sem permissão para gerar ou alterar lançamentos da folha. "
    "Verifique se seu usuário é Admin, Financeiro ou Secretaria."
)


class PayrollError(Exception):
    """Base para erros da geração de contas da folha."""

    code = "payroll-error"


class StoreReadError(PayrollError):
    """Falha ao listar registros existentes. A geração é abortada antes de qualquer escrita."""

    code = "read-failed"


class StoreWriteError(PayrollError):
    """Falha ao gravar um registro isolado."""

    code = "write-failed"


class StorePermissionDenied(PayrollError):
    """O perfil do usuário não permite alterar a folha."""

    code = PERMISSION_DENIED_CODE

    def __init__(self, message: str = PERMISSION_DENIED_MESSAGE):
        super().__init__(message)
        self.message = message
