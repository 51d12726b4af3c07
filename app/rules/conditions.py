# app/rules/conditions.py

"""
Bahasa kondisi kecil untuk tabel aturan.

Satu kondisi = satu string:
    "son"            -> ada anak laki-laki (yang tidak mahjub)
    "!father"        -> tidak ada ayah
    "daughter>=2"    -> minimal dua anak perempuan
    "@descendant"    -> total bobot pool 'descendant' > 0
    "@siblings>=2"   -> total bobot pool 'siblings' >= 2
Daftar kondisi dalam satu klausa digabung dengan AND.
"""

from __future__ import annotations

import operator
import re
from functools import lru_cache
from typing import Callable, Dict, Iterable, Mapping, NamedTuple, Optional

from schemas import HeirType

_TOKEN = re.compile(r"^(?P<neg>!)?(?P<pool>@)?(?P<name>[a-z][a-z0-9_-]*)(?:(?P<op>>=|<=|==|>|<)(?P<value>\d+))?$")

_OPS: Dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
}

SCOPE_ELIGIBLE = "eligible"
SCOPE_SELECTED = "selected"


class Condition(NamedTuple):
    text: str
    negated: bool
    is_pool: bool
    name: str
    op: str
    value: int


@lru_cache(maxsize=None)
def parse_condition(text: str) -> Condition:
    m = _TOKEN.match(text.strip())
    if not m:
        raise ValueError(f"Kondisi tidak valid: {text!r}")
    is_pool = bool(m.group("pool"))
    name = m.group("name")
    if not is_pool:
        try:
            HeirType(name)
        except ValueError:
            raise ValueError(f"Ahli waris tidak dikenal di kondisi {text!r}") from None
    op = m.group("op") or ">"
    value = int(m.group("value")) if m.group("value") is not None else 0
    return Condition(text=text, negated=bool(m.group("neg")), is_pool=is_pool, name=name, op=op, value=value)


class Composition:
    """
    Susunan ahli waris untuk satu perhitungan.
    - selected : semua yang dipilih pengguna (termasuk yang nanti mahjub)
    - eligible : yang belum terhalang
    Pool memilih sendiri scope-nya (eligible / selected).
    """

    def __init__(self,
                 selected: Mapping[HeirType, int],
                 eligible: Optional[Mapping[HeirType, int]] = None,
                 pools: Optional[Mapping[str, object]] = None):
        self.selected = {HeirType(k): v for k, v in selected.items() if v > 0}
        source = selected if eligible is None else eligible
        self.eligible = {HeirType(k): v for k, v in source.items() if v > 0}
        self.pools = pools or {}

    def without(self, heirs: Iterable[HeirType]) -> "Composition":
        removed = set(heirs)
        remaining = {h: n for h, n in self.eligible.items() if h not in removed}
        return Composition(self.selected, remaining, self.pools)

    def count(self, heir: HeirType) -> int:
        return self.eligible.get(HeirType(heir), 0)

    def has(self, heir: HeirType) -> bool:
        return self.count(heir) > 0

    def pool_total(self, name: str) -> int:
        pool = self.pools[name]
        counts = self.selected if pool.scope == SCOPE_SELECTED else self.eligible
        return sum(counts.get(h, 0) * w for h, w in pool.members.items())

    def pool_heads(self, name: str) -> int:
        pool = self.pools[name]
        counts = self.selected if pool.scope == SCOPE_SELECTED else self.eligible
        return sum(counts.get(h, 0) for h in pool.members)

    def holds(self, cond: Condition) -> bool:
        actual = self.pool_total(cond.name) if cond.is_pool else self.count(HeirType(cond.name))
        result = _OPS[cond.op](actual, cond.value)
        return not result if cond.negated else result

    def all_hold(self, conditions: Iterable[Condition]) -> bool:
        return all(self.holds(c) for c in conditions)
