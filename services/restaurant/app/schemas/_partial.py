from typing import Any, Iterable


def reject_explicit_nulls(data: Any, fields: Iterable[str]) -> Any:
    """Rejeita ``{"campo": null}`` para colunas NOT NULL.

    Em atualizações parciais a chave ausente significa "manter" e o null
    explícito significa "limpar", então o null é recusado logo na entrada
    quando a coluna não o aceita.
    """
    if isinstance(data, dict):
        nulled = sorted(field for field in fields if field in data and data[field] is None)
        if nulled:
            raise ValueError(f"Campos não aceitam nulo: {', '.join(nulled)}")
    return data
