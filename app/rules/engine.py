# app/rules/engine.py

from __future__ import annotations

import logging
from fractions import Fraction
from typing import List, Optional

from app.rules.conditions import Composition
from app.rules.loader import RuleTable, RuleTableError, ShareClause
from app.rules.registry import HEIR_ORDER, label_for
from schemas import FurudhItem, HeirType

logger = logging.getLogger(__name__)


def _bucket_matches(clause: ShareClause, heir: HeirType, comp: Composition) -> bool:
    """Bagian golongan dicari per 'count bucket' (1 vs >=2), bukan dikali jumlah orang."""
    if clause.count is None:
        return True
    n = comp.pool_heads(clause.pool) if clause.pool else comp.count(heir)
    return n == 1 if clause.count == "single" else n >= 2


def _select_clause(table: RuleTable, heir: HeirType, comp: Composition) -> ShareClause:
    for clause in table.shares[heir]:
        if comp.all_hold(clause.conditions) and _bucket_matches(clause, heir, comp):
            return clause
    raise RuleTableError(
        f"Tabel {table.school.value}: tidak ada klausa yang cocok untuk {heir.value} "
        f"dengan susunan {sorted(h.value for h in comp.eligible)}"
    )


def _clause_fraction(clause: ShareClause, heir: HeirType, comp: Composition) -> Optional[Fraction]:
    share = clause.share
    if share is None or not clause.pool:
        return share
    # furudh golongan lintas tipe (misal saudara seibu lk & pr): dibagi rata per kepala
    return share * comp.count(heir) / comp.pool_heads(clause.pool)


# =========================
# Mesin penentu furūḍ
# =========================
def determine_furudh(table: RuleTable, comp: Composition) -> List[FurudhItem]:
    """
    Menghasilkan daftar FurudhItem (furūḍ & ‘ashabah) untuk setiap ahli waris yang tidak mahjub.
    Catatan:
      - Klausa pertama yang cocok yang dipakai (urutan di tabel = prioritas).
      - Furūḍ jama’i (2/3, 1/3) adalah bagian kelompok, TIDAK dikali jumlah orang.
      - Sisa, Aul, Radd ditangani di calculator.py.
    """
    items: List[FurudhItem] = []
    for heir in sorted(comp.eligible, key=HEIR_ORDER.__getitem__):
        clause = _select_clause(table, heir, comp)
        fraction = _clause_fraction(clause, heir, comp)
        items.append(FurudhItem(
            heir=heir,
            quantity=comp.count(heir),
            fraction=fraction,
            residuary=clause.residuary,
            reason=clause.basis,
        ))
        logger.debug("%s: %s (%s)", label_for(heir), fraction if fraction is not None else "ashabah", clause.basis)
    return items
