from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator


def _validar_formato(value: str) -> str:
    # valida o formato mas guarda o e-mail exatamente como foi enviado,
    # pois o login compara o texto informado sem normalização
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"E-mail inválido: {exc}") from exc
    return value


SubmittedEmail = Annotated[str, AfterValidator(_validar_formato)]
