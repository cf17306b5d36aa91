"""Erros de domínio levantados pelo crud e traduzidos pelos routers."""


class ServiceError(Exception):
    """Base para falhas de regra de negócio com mensagem legível."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class EntityNotFoundError(ServiceError):
    """Entidade inexistente ou fora do restaurante do chamador.

    Os dois casos compartilham o erro e a mensagem para que não seja possível
    descobrir registros de outros tenants.
    """


class DependencyMissingError(ServiceError):
    """Registro pai referenciado (ex.: o restaurante) não existe."""


class TenantAssignmentError(ServiceError):
    """Papel do usuário e restaurante associado são inconsistentes."""


class TenantScopeError(ServiceError):
    """Chamador sem contexto de tenant utilizável."""


class PermissionDeniedError(ServiceError):
    """Chamador tentou gerenciar um papel com permissões que ele não possui."""
