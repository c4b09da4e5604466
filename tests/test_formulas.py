from math import isclose
from esboost.domain.formulas import (
    total_capacity,
    months_remaining,
    years_remaining,
    consumed_pct,
    needed_permits_for_buffer,
    months_to_buffer,
    avg_monthly_rate,
)

def test_capacidade_e_meses():
    cap = total_capacity(5)
    assert cap == 500000
    m = months_remaining(cap, 32000)
    assert isclose(m, 15.625, rel_tol=1e-9)
    assert isclose(years_remaining(m), 15.625 / 12, rel_tol=1e-9)

def test_consumed_pct():
    assert isclose(consumed_pct(250000, 500000), 50.0, rel_tol=1e-9)
    # sem capacidade → tudo consumido
    assert consumed_pct(10, 0) == 100.0
    assert consumed_pct(0, 0) == 100.0

def test_needed_permits_for_buffer():
    # 10k t/mês por 22 meses = 220k; com 100k em mãos faltam 1.2 → 2 permissões
    assert needed_permits_for_buffer(100000, 10000, 10, 12) == 2
    # colchão zero → nada a comprar
    assert needed_permits_for_buffer(100000, 10000, 10, 0) == 0
    assert needed_permits_for_buffer(10_000_000, 10_000_000, 1, 12) == 1200

def test_months_to_buffer_formula_peculiar():
    # target - (months - target) = 2*target - months
    assert months_to_buffer(10, 12) == 14
    assert months_to_buffer(15.625, 12) == 8.375
    # cobertura curta: passa do próprio colchão
    assert months_to_buffer(1, 12) == 23
    assert months_to_buffer(200, 12) == 0.0

def test_avg_monthly_rate():
    assert avg_monthly_rate([]) is None
    assert avg_monthly_rate([100.0, 300.0]) == 200.0
