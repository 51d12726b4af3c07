# app/math/inkisar.py

import logging
import math
from typing import List, Tuple

logger = logging.getLogger(__name__)


def _relation(a: int, b: int) -> str:
    """
    Hubungan jumlah kepala (ru'us) dengan saham kelompok:
    - identical  : a == b
    - nested     : salah satunya membagi yang lain
    - coprime    : gcd(a, b) == 1
    - compatible : selain itu
    """
    if a == b:
        return "identical"
    if a % b == 0 or b % a == 0:
        return "nested"
    if math.gcd(a, b) == 1:
        return "coprime"
    return "compatible"


def _single_group_factor(ruus: int, saham_kelompok: int) -> int:
    """
    Pengali minimal agar saham_kelompok habis dibagi ruus.
      - saham 0 / sudah habis dibagi -> 1
      - coprime    -> ruus
      - compatible / nested -> ruus / gcd
    """
    if saham_kelompok == 0 or saham_kelompok % ruus == 0:
        return 1
    return ruus // math.gcd(ruus, saham_kelompok)


def compute_tashih(groups: List[Tuple[str, int, int]]) -> int:
    """
    Hitung faktor tashih inkisar untuk semua kelompok sekaligus.
    groups = list of (nama_kelompok, ruus, saham_kelompok)
    Faktor gabungan = KPK faktor tiap kelompok (bukan hasil kali), sehingga base tetap minimal.
    """
    multiplier = 1
    for nama, ruus, saham_k in groups:
        if ruus <= 1:
            continue
        f = _single_group_factor(ruus, saham_k)
        if f > 1:
            logger.debug("Inkisar %s: ru'us %d : saham %d -> %s, faktor %d",
                         nama, ruus, saham_k, _relation(ruus, saham_k), f)
        multiplier = math.lcm(multiplier, f)
    return multiplier
