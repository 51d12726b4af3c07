# app/math/ashl.py

import math
from fractions import Fraction
from typing import Iterable, List

from schemas import AshlInfo, ComparisonItem


def bandingkan(a: int, b: int) -> ComparisonItem:
    """
    Bandingkan dua penyebut furudh:
    - identical  (mumatsalah) : sama
    - nested     (mudakholah) : salah satu habis membagi yang lain
    - compatible (muwafaqoh)  : ada faktor persekutuan > 1
    - coprime    (mubayanah)  : tidak ada faktor persekutuan
    """
    if a == b:
        relation = "identical"
    elif a % b == 0 or b % a == 0:
        relation = "nested"
    elif math.gcd(a, b) > 1:
        relation = "compatible"
    else:
        relation = "coprime"

    return ComparisonItem(a=a, b=b, relation=relation, lcm=math.lcm(a, b))


def compute_ashl(denominators: List[int]) -> AshlInfo:
    """
    Menentukan Aslul Mas’alah (base) dari daftar penyebut furudh:
    1. Buang penyebut ganda (urutan kemunculan dipertahankan)
    2. Bandingkan dua-dua untuk catatan
    3. KPK semua penyebut = base
    Tanpa furudh sama sekali base = 1 (diisi ulang oleh kalkulator bila semua 'ashabah).
    """
    unique = list(dict.fromkeys(d for d in denominators if d > 0))
    if not unique:
        return AshlInfo(ashl_awal=1, ashl_akhir=1, tashih=1, corrected_base=1, comparisons=[])

    comparisons: List[ComparisonItem] = []
    for i in range(len(unique)):
        for j in range(i + 1, len(unique)):
            comparisons.append(bandingkan(unique[i], unique[j]))

    ashl_awal = math.lcm(*unique)
    return AshlInfo(
        ashl_awal=ashl_awal,
        ashl_akhir=ashl_awal,   # bisa berubah karena aul/radd
        tashih=1,
        corrected_base=ashl_awal,
        comparisons=comparisons,
    )


def base_of(fractions: Iterable[Fraction]) -> int:
    """KPK penyebut semua pecahan bukan nol."""
    dens = [f.denominator for f in fractions if f]
    return math.lcm(*dens) if dens else 1
