"""
Utilidades de formatação para exibir o status das permissões.

Estas funções só afetam a apresentação: o limite de ">10.0" anos, por
exemplo, não altera o valor calculado.
"""

from __future__ import annotations

from typing import Union

from esboost.domain.models import GREEN, RED, YELLOW


def format_number(num: Union[int, float]) -> str:
    """Número com separador de milhar (até 3 casas decimais).

    Exemplos:
        1234567   → "1,234,567"
        1234.5    → "1,234.5"
        0.12345   → "0.123"
    """
    value = float(num)
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_years(years: float) -> str:
    """Anos com uma casa decimal; acima de 10 anos exibe ``">10.0"``."""
    if years > 10:
        return ">10.0"
    return f"{years:.1f}"


def get_status_label(status: str, years: float) -> str:
    """Rótulo do semáforo com os anos restantes interpolados."""
    if status == GREEN:
        return f"🟢 Green — validity >24 months ({format_years(years)} years)"
    if status == YELLOW:
        return f"🟡 Yellow — validity between 12–24 months ({format_years(years)} years)"
    if status == RED:
        return f"🔴 Red — validity ≤12 months ({format_years(years)} years)"
    raise ValueError(f"unknown status: {status!r}")


def format_file_size(num_bytes: int) -> str:
    """Tamanho de arquivo legível (base 1024)."""
    if num_bytes == 0:
        return "0 Bytes"
    sizes = ["Bytes", "KB", "MB", "GB"]
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(sizes) - 1:
        value /= 1024
        i += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {sizes[i]}"
