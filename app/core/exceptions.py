"""
Advocacia SaaS - Domain Exceptions
Erros de negócio convertidos em respostas HTTP pelos handlers do app
"""


class AppError(Exception):
    """Erro base da aplicação"""
    status_code = 500
    default_message = "Erro interno do servidor"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    default_message = "Registro não encontrado"


class PermissionDeniedError(AppError):
    status_code = 403
    default_message = "Acesso negado"


class ConflictError(AppError):
    status_code = 409
    default_message = "Registro duplicado"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Não autenticado"


class BadRequestError(AppError):
    status_code = 400
    default_message = "Requisição inválida"


class DatabaseQueryError(AppError):
    status_code = 500
    default_message = "Erro na consulta ao banco de dados"


class ProvisioningError(AppError):
    """Erro durante o provisionamento do schema do tenant"""
    status_code = 500
    default_message = "Erro ao provisionar o tenant"


class EmailNotConfiguredError(AppError):
    status_code = 503
    default_message = "Serviço de email não configurado"
