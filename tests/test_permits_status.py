from math import isclose

import pytest

from esboost.domain.models import (
    GREEN,
    RED,
    YELLOW,
    PermitInventoryInput,
    PermitsStatus,
)
from esboost.usecases.permits_status import (
    MISSING_DATA_ERROR,
    NON_POSITIVE_RATE_ERROR,
    calculate_permits_status,
)


def test_cenario_amarelo():
    st = calculate_permits_status({"active_permits": 5, "avg_consumption_rate_t_per_month": 32000})
    assert st.is_valid
    assert st.error is None
    d = st.data
    assert d.total_capacity_t == 500000
    assert isclose(d.months_remaining, 15.625, rel_tol=1e-9)
    assert isclose(d.years_remaining, 1.302, rel_tol=1e-3)
    assert d.status_light == YELLOW
    assert d.needed_permits_for_buffer == 4
    assert d.months_to_buffer == 8.375
    assert d.consumed_pct is None
    assert st.recommendations == [
        "Model a 10–20% reduction scenario; buying 4 permits extends coverage to >24 months.",
        "Evaluate emission reduction initiatives to improve permit efficiency.",
        "Set an alert at 80% capacity used.",
    ]


def test_sem_permissoes():
    st = calculate_permits_status({"active_permits": 0, "avg_consumption_rate_t_per_month": 1000})
    assert st.is_valid
    assert st.data.status_light == RED
    assert st.data.total_capacity_t == 0
    assert st.recommendations == [
        "Procure permits immediately - no active permits available.",
        "Contact compliance team to avoid regulatory penalties.",
    ]


def test_cenario_verde_longo_prazo():
    st = calculate_permits_status({"active_permits": 20, "avg_consumption_rate_t_per_month": 10000})
    d = st.data
    assert d.total_capacity_t == 2000000
    assert d.months_remaining == 200
    assert isclose(d.years_remaining, 16.6667, rel_tol=1e-4)
    assert d.status_light == GREEN
    assert len(st.recommendations) == 3
    assert "long-term" in st.recommendations[2]


def test_cenario_vermelho():
    st = calculate_permits_status({"active_permits": 1, "avg_consumption_rate_t_per_month": 10000})
    assert st.data.status_light == RED
    assert st.data.needed_permits_for_buffer == 2
    assert st.data.months_to_buffer == 14
    assert st.recommendations[0] == (
        "At the current usage rate, buy 2 permits within 14 months to maintain a 12-month buffer."
    )
    assert len(st.recommendations) == 3


def test_consumo_zero_invalido():
    st = calculate_permits_status({"active_permits": 1, "avg_consumption_rate_t_per_month": 0})
    assert st == PermitsStatus(is_valid=False, error=NON_POSITIVE_RATE_ERROR, data=None, recommendations=[])
    assert st.error == "Average consumption must be > 0 tCO₂/month."


def test_consumo_negativo_invalido():
    st = calculate_permits_status({"active_permits": 1, "avg_consumption_rate_t_per_month": -5})
    assert not st.is_valid
    assert st.error == NON_POSITIVE_RATE_ERROR


@pytest.mark.parametrize(
    "inp",
    [
        {"active_permits": 5},
        {"avg_consumption_rate_t_per_month": 1000},
        {"active_permits": None, "avg_consumption_rate_t_per_month": 1000},
        {},
        None,
    ],
)
def test_dados_insuficientes(inp):
    st = calculate_permits_status(inp)
    assert not st.is_valid
    assert st.data is None
    assert st.recommendations == []
    assert st.error == (
        "Insufficient data to calculate permit validity. "
        "Please provide active_permits and avg_consumption_rate_t_per_month."
    )
    assert st.error == MISSING_DATA_ERROR


@pytest.mark.parametrize("permits,rate,expected", [(6, 25000, YELLOW), (3, 25000, RED)])
def test_limites_exatos(permits, rate, expected):
    # 24 meses exatos não é verde; 12 meses exatos é vermelho
    st = calculate_permits_status({"active_permits": permits, "avg_consumption_rate_t_per_month": rate})
    assert st.data.status_light == expected


def test_consumed_pct_presente_somente_com_emissoes():
    com = calculate_permits_status({
        "active_permits": 5,
        "avg_consumption_rate_t_per_month": 32000,
        "cumulative_emissions_t": 250000,
    })
    assert isclose(com.data.consumed_pct, 50.0)
    zero = calculate_permits_status({
        "active_permits": 5,
        "avg_consumption_rate_t_per_month": 32000,
        "cumulative_emissions_t": 0,
    })
    assert zero.data.consumed_pct == 0.0
    sem_capacidade = calculate_permits_status({
        "active_permits": 0,
        "avg_consumption_rate_t_per_month": 1000,
        "cumulative_emissions_t": 5000,
    })
    assert sem_capacidade.data.consumed_pct == 100.0


def test_aceita_dataclass_e_nao_altera_entrada():
    inp = PermitInventoryInput(
        active_permits=1,
        avg_consumption_rate_t_per_month=10000,
        target_buffer_months=6,
        warning_threshold_pct=70,
    )
    st = calculate_permits_status(inp)
    assert st.data.needed_permits_for_buffer == 1
    assert st.data.months_to_buffer == 2
    assert st.recommendations[0] == (
        "At the current usage rate, buy 1 permits within 2 months to maintain a 6-month buffer."
    )
    assert inp.target_buffer_months == 6

    d = {"active_permits": 5, "avg_consumption_rate_t_per_month": 32000}
    copia = dict(d)
    primeiro = calculate_permits_status(d)
    assert d == copia
    assert calculate_permits_status(d) == primeiro


def test_invariantes_gerais():
    for permits in (0, 1, 2, 5, 13, 40, 250):
        for rate in (500, 9999.5, 32000, 250000):
            st = calculate_permits_status({
                "active_permits": permits,
                "avg_consumption_rate_t_per_month": rate,
            })
            d = st.data
            assert d.total_capacity_t == permits * 100000
            assert isclose(d.months_remaining, d.total_capacity_t / rate, rel_tol=1e-12, abs_tol=1e-12)
            assert isclose(d.years_remaining, d.months_remaining / 12, rel_tol=1e-12, abs_tol=1e-12)
            assert d.needed_permits_for_buffer >= 0
            assert d.months_to_buffer >= 0
            assert len(st.recommendations) <= 3
