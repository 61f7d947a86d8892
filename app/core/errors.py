"""
Domain error taxonomy

Precondition failures, integrity violations and storage failures are raised
as typed exceptions and rendered by the exception handler registered in the
application factory. None of them is ever retried or corrected silently.
"""

from fastapi import Request
from fastapi.responses import JSONResponse


class DomainError(Exception):
    """Base class for every error surfaced to the actor"""

    code = "DomainError"
    status_code = 400
    default_message = "Operação não permitida"

    def __init__(self, message: str = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "detail": self.message}


# --- Precondition violations -------------------------------------------------

class PreconditionFailed(DomainError):
    code = "PreconditionFailed"
    status_code = 409


class AssetNotAvailable(PreconditionFailed):
    code = "AssetNotAvailable"
    default_message = "O ativo não está disponível para entrega"


class AssetNotInUse(PreconditionFailed):
    code = "AssetNotInUse"
    default_message = "O ativo não está em uso"


class HasActiveAssets(PreconditionFailed):
    code = "HasActiveAssets"
    default_message = "O colaborador ainda possui ativos em posse"


class AlreadyInactive(PreconditionFailed):
    code = "AlreadyInactive"
    default_message = "O colaborador já está inativo"


class AlreadyActive(PreconditionFailed):
    code = "AlreadyActive"
    default_message = "O colaborador já está ativo"


class AlreadyRetired(PreconditionFailed):
    code = "AlreadyRetired"
    default_message = "O dispositivo já está descartado"


class NotRetired(PreconditionFailed):
    code = "NotRetired"
    default_message = "O dispositivo não está descartado"


class StillInUse(PreconditionFailed):
    code = "StillInUse"
    default_message = "O dispositivo está em uso e precisa ser devolvido primeiro"


class DeviceRetired(PreconditionFailed):
    code = "DeviceRetired"
    default_message = "O dispositivo está descartado"


class SimLinkedToDevice(PreconditionFailed):
    code = "SimLinkedToDevice"
    default_message = "O chip está vinculado a um dispositivo e acompanha a sua movimentação"


class SimAlreadyLinked(PreconditionFailed):
    code = "SimAlreadyLinked"
    default_message = "O chip já está vinculado a outro dispositivo"


class RecordInUse(PreconditionFailed):
    code = "RecordInUse"
    default_message = "O registro ainda é referenciado por outros cadastros"


class NotRestorable(PreconditionFailed):
    code = "NotRestorable"
    default_message = "Este registro de auditoria não permite restauração"


# --- Integrity violations ----------------------------------------------------

class IntegrityViolation(DomainError):
    code = "IntegrityViolation"
    status_code = 422


class DuplicateValue(IntegrityViolation):
    code = "DuplicateValue"
    default_message = "Valor já cadastrado"


class MissingIdentifier(IntegrityViolation):
    code = "MissingIdentifier"
    default_message = "Identificador obrigatório não informado"


class AmbiguousOwnership(IntegrityViolation):
    code = "AmbiguousOwnership"
    default_message = "A conta deve pertencer a um colaborador ou a um dispositivo, não a ambos"


class ReasonRequired(IntegrityViolation):
    code = "ReasonRequired"
    default_message = "Informe o motivo da operação"


class InvalidActor(IntegrityViolation):
    code = "InvalidActor"
    default_message = "Operador responsável não informado"


# --- Lookup and infrastructure -----------------------------------------------

class EntityNotFound(DomainError):
    code = "EntityNotFound"
    status_code = 404
    default_message = "Registro não encontrado"


class StorageUnavailable(DomainError):
    code = "StorageUnavailable"
    status_code = 503
    default_message = "Armazenamento indisponível"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error verbatim for the caller"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
