"""
Políticas de classificação e recomendações para o inventário de permissões.

Este módulo contém funções que encapsulam as regras de negócio de
classificação do semáforo (verde/amarelo/vermelho) e de geração das
recomendações exibidas junto ao status. As funções aqui expostas são
utilizadas pela camada de aplicação ao montar o ``PermitsStatus``.
"""

from __future__ import annotations

from math import ceil
from typing import List, Union

from esboost.domain.models import GREEN, RED, YELLOW


MAX_RECOMMENDATIONS = 3

NO_PERMITS_RECOMMENDATIONS = (
    "Procure permits immediately - no active permits available.",
    "Contact compliance team to avoid regulatory penalties.",
)


def status_light(active_permits: Union[int, float], months_remaining: float) -> str:
    """Classifica o inventário no semáforo.

    Regras (avaliadas nesta ordem):
        - ``active_permits == 0`` → ``'red'``
        - ``months_remaining > 24`` → ``'green'``
        - ``months_remaining > 12`` → ``'yellow'``
        - caso contrário → ``'red'``

    Os limites são estritos: exatamente 24 meses é amarelo e exatamente
    12 meses é vermelho.
    """
    if active_permits == 0:
        return RED
    if months_remaining > 24:
        return GREEN
    if months_remaining > 12:
        return YELLOW
    return RED


def _plain(value: Union[int, float]) -> str:
    """Número como texto, sem casa decimal quando for inteiro (12, não 12.0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def recommendations_for(
    active_permits: Union[int, float],
    light: str,
    needed_permits: int,
    months_to_buffer: float,
    years_remaining: float,
    target_buffer_months: float,
    warning_threshold_pct: float,
) -> List[str]:
    """Gera até três recomendações, em ordem de prioridade.

    Sem permissões ativas, devolve apenas as duas mensagens urgentes de
    aquisição. Nos demais casos a lista depende do semáforo e é truncada
    em ``MAX_RECOMMENDATIONS``.
    """
    if active_permits == 0:
        return list(NO_PERMITS_RECOMMENDATIONS)

    recs: List[str] = []
    if light == RED:
        if needed_permits > 0:
            recs.append(
                f"At the current usage rate, buy {needed_permits:,} permits within "
                f"{int(ceil(months_to_buffer))} months to maintain a "
                f"{_plain(target_buffer_months)}-month buffer."
            )
        recs.append("Implement immediate emission reduction measures to extend permit validity.")
        if len(recs) < MAX_RECOMMENDATIONS:
            recs.append("Review monthly consumption patterns for optimization opportunities.")
    elif light == YELLOW:
        if needed_permits > 0:
            recs.append(
                f"Model a 10–20% reduction scenario; buying {needed_permits:,} permits "
                f"extends coverage to >24 months."
            )
        recs.append("Evaluate emission reduction initiatives to improve permit efficiency.")
        if len(recs) < MAX_RECOMMENDATIONS:
            recs.append(f"Set an alert at {_plain(warning_threshold_pct)}% capacity used.")
    elif light == GREEN:
        recs.append("Revisit average consumption quarterly; set auto-alert at 80% capacity used.")
        recs.append("Consider banking excess permits or trading opportunities.")
        if years_remaining > 5:
            recs.append("Evaluate long-term emission reduction investments for cost optimization.")

    return recs[:MAX_RECOMMENDATIONS]
