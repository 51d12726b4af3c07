# Di dalam file: test_estate.py

from fractions import Fraction

import pytest

from app.math.estate import allocate, net_estate, round_half_up, wasiyyah_limit


@pytest.mark.parametrize("gross, debts, funeral, wasiyyah, expected", [
    (1000, 0, 0, 0, 1000),
    (1000, 100, 50, 50, 800),
    (100, 80, 30, 0, 0),
    (0, 0, 0, 0, 0),
])
def test_net_estate(gross, debts, funeral, wasiyyah, expected):
    assert net_estate(gross, debts, funeral, wasiyyah) == expected


def test_wasiyyah_limit():
    assert wasiyyah_limit(1000, 100, 0) == 300
    assert wasiyyah_limit(100, 0, 0) == 33
    assert wasiyyah_limit(100, 200, 0) == 0


@pytest.mark.parametrize("value, expected", [
    (Fraction(5, 2), 3),
    (Fraction(7, 3), 2),
    (Fraction(8, 3), 3),
    (Fraction(4), 4),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_allocate_jumlah_sama_dengan_net():
    shares = [(Fraction(1, 9), 1), (Fraction(16, 27), 2), (Fraction(4, 27), 1), (Fraction(4, 27), 1)]
    out = allocate(1_000_001, shares)
    assert sum(total for total, _, _ in out) == 1_000_001


def test_allocate_sisa_ke_pecahan_terbesar():
    out = allocate(10, [(Fraction(1, 3), 1), (Fraction(1, 3), 1), (Fraction(1, 3), 1)])
    # sama besar -> yang pertama
    assert [t for t, _, _ in out] == [4, 3, 3]


def test_allocate_per_orang_dan_persen():
    out = allocate(1000, [(Fraction(2, 3), 3), (Fraction(1, 3), 1)])
    assert out[0] == (667, 222, 66.67)
    assert out[1] == (333, 333, 33.33)


def test_allocate_net_nol():
    out = allocate(0, [(Fraction(1, 2), 1), (Fraction(1, 2), 2)])
    assert [t for t, _, _ in out] == [0, 0]
