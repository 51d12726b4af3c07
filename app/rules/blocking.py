# app/rules/blocking.py

import logging
from typing import Dict, List, Mapping, NamedTuple

from app.rules.conditions import Composition
from app.rules.loader import BlockingRule, RuleTable
from app.rules.registry import HEIR_ORDER, is_applicable, label_for
from schemas import BlockedHeir, Gender, HeirType

logger = logging.getLogger(__name__)


class BlockingOutcome(NamedTuple):
    eligible: Dict[HeirType, int]
    blocked: List[BlockedHeir]


def _blocker_present(rule: BlockingRule, selected: Composition, current: Composition) -> bool:
    # blocker yang sudah mahjub hanya dihitung bila aturan mengizinkan
    source = current if rule.blocker_must_be_eligible else selected
    if rule.by.startswith("@"):
        return source.pool_total(rule.by[1:]) > 0
    return source.has(HeirType(rule.by))


def resolve_blocking(table: RuleTable,
                     deceased_gender: Gender,
                     selection: Mapping[HeirType, int]) -> BlockingOutcome:
    """
    Terapkan aturan hijab (hajb hirman) sesuai urutan blocking_precedence di tabel.
    - Kondisi 'when' dilihat dari ahli waris yang belum terhalang oleh aturan sebelumnya.
    - Bila satu ahli waris terhalang oleh beberapa aturan, sebab dari aturan TERAKHIR yang dicatat.
    """
    for heir in selection:
        if not is_applicable(heir, deceased_gender):
            raise ValueError(f"{heir} tidak berlaku untuk pewaris {Gender(deceased_gender).value}")

    selected = Composition(selection, pools=table.pools)
    causes: Dict[HeirType, BlockingRule] = {}

    for rule in table.ordered_blocking():
        current = selected.without(causes)
        if not _blocker_present(rule, selected, current):
            continue
        if not current.all_hold(rule.conditions):
            continue
        for heir in rule.blocked:
            if selected.selected.get(heir, 0) > 0 and heir.value != rule.by:
                if heir in causes:
                    logger.debug("%s: sebab hijab diganti %s -> %s", heir.value, causes[heir].id, rule.id)
                causes[heir] = rule

    eligible = {h: n for h, n in selected.selected.items() if h not in causes}
    blocked = [
        BlockedHeir(
            heir=heir,
            label=label_for(heir),
            count=selected.selected[heir],
            blocked_by=rule.cause,
            rule=rule.id,
        )
        for heir, rule in sorted(causes.items(), key=lambda kv: HEIR_ORDER[kv[0]])
    ]
    for b in blocked:
        logger.debug("Mahjub: %s oleh %s (%s)", b.label, b.blocked_by, b.rule)
    return BlockingOutcome(eligible=eligible, blocked=blocked)
