# app/math/estate.py

import math
from fractions import Fraction
from typing import List, Sequence, Tuple

# Semua nominal dalam satuan mata uang terkecil (int).


def net_estate(gross: int, debts: int, funeral: int, wasiyyah: int) -> int:
    """Tirkah bersih = tirkah - hutang - biaya pengurusan jenazah - wasiat (tidak pernah negatif)."""
    return max(0, gross - debts - funeral - wasiyyah)


def wasiyyah_limit(gross: int, debts: int, funeral: int) -> int:
    """Batas wasiat: sepertiga dari harta setelah hutang & biaya jenazah."""
    return max(0, (gross - debts - funeral) // 3)


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def allocate(net: int, shares: Sequence[Tuple[Fraction, int]]) -> List[Tuple[int, int, float]]:
    """
    Ubah pecahan final menjadi nominal.
    shares = list of (pecahan, jumlah orang), urutan dipertahankan.
    Return list of (total_amount, per_person_amount, persentase).
      - total = floor(net x pecahan)
      - sisa pembulatan diberikan ke pecahan terbesar (yang pertama bila sama besar)
        sehingga jumlah total == net
    """
    totals = [math.floor(net * f) for f, _ in shares]
    remainder = net - sum(totals)
    if remainder and shares:
        largest = max(range(len(shares)), key=lambda i: (shares[i][0], -i))
        totals[largest] += remainder

    out: List[Tuple[int, int, float]] = []
    for total, (f, count) in zip(totals, shares):
        per_person = round_half_up(Fraction(total, count)) if count > 0 else 0
        out.append((total, per_person, round(float(f * 100), 2)))
    return out
