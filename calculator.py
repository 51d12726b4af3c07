# calculator.py

from __future__ import annotations

import logging
import math
from fractions import Fraction
from typing import Dict, List, NamedTuple, Optional, Tuple

import schemas
from app.math.ashl import base_of, compute_ashl
from app.math.estate import allocate, net_estate, wasiyyah_limit
from app.math.inkisar import compute_tashih
from app.rules import registry
from app.rules.blocking import resolve_blocking
from app.rules.conditions import Composition
from app.rules.engine import determine_furudh
from app.rules.loader import RULES_DIR, RuleTable, load_rule_table
from breakdown import get_inheritance_breakdown
from config import Settings, get_settings
from schemas import FailureCode, FieldError, FurudhItem, HeirType, SolverState

__all__ = [
    "ShareInvariantError",
    "calculate_inheritance",
    "get_inheritance_breakdown",
    "validate_input",
]

logger = logging.getLogger(__name__)

SPOUSES = {HeirType.HUSBAND, HeirType.WIFE}

ZERO = Fraction(0)
ONE = Fraction(1)


class ShareInvariantError(RuntimeError):
    """Jumlah bagian final tidak sama dengan 1 (kesalahan program / tabel, bukan input)."""


class _Solved(NamedTuple):
    final: Dict[HeirType, Fraction]
    fixed: Dict[HeirType, Fraction]          # furudh sebelum aul/radd
    residue: Dict[HeirType, Fraction]        # porsi sisa per ahli waris 'ashabah
    subscription: SolverState
    fixed_total: Fraction
    leftover: Fraction                       # sisa setelah furudh (0 bila aul)
    has_awl: bool
    has_radd: bool
    note: Optional[str]
    factor: Optional[Fraction]
    residue_weight: int


# --------------------------
# Validasi input
# --------------------------
def _fail(code: FailureCode, message: str, errors: List[FieldError]) -> schemas.ValidationFailure:
    logger.info("Input ditolak (%s): %s", code.value, "; ".join(f"{e.field}: {e.message}" for e in errors) or message)
    return schemas.ValidationFailure(code=code, message=message, errors=errors)


def validate_input(calculation_input: schemas.CalculationInput,
                   settings: Settings) -> Tuple[Optional[schemas.ValidationFailure], Dict[HeirType, int]]:
    """
    Cek input sebelum perhitungan. Kegagalan DIKEMBALIKAN (bukan di-raise).
    Urutan: pilihan ahli waris -> nominal harta -> pilihan kosong.
    """
    gender = calculation_input.deceased_gender
    selection: Dict[HeirType, int] = {}
    errors: List[FieldError] = []

    for key, count in calculation_input.heirs.items():
        field = f"heirs.{key}"
        try:
            heir = HeirType(key)
        except ValueError:
            errors.append(FieldError(field=field, message=f"Unknown heir type '{key}'"))
            continue
        cfg = registry.config_for(heir)
        if count < 1:
            errors.append(FieldError(field=field, message="Count must be at least 1"))
        elif count > cfg.max_count:
            errors.append(FieldError(field=field, message=f"{cfg.label} allows at most {cfg.max_count}"))
        elif not registry.is_applicable(heir, gender):
            errors.append(FieldError(
                field=field,
                message=f"{cfg.label} cannot inherit from a {gender.value} deceased",
            ))
        else:
            selection[heir] = count

    total_heads = sum(c for c in calculation_input.heirs.values() if c > 0)
    if total_heads > settings.max_total_heirs:
        errors.append(FieldError(
            field="heirs",
            message=f"Total number of heirs {total_heads} exceeds the limit of {settings.max_total_heirs}",
        ))
    if errors:
        return _fail(FailureCode.INVALID_HEIR_SELECTION, "Invalid heir selection", errors), {}

    money = {
        "estate_value": calculation_input.estate_value,
        "debts": calculation_input.debts,
        "funeral_expenses": calculation_input.funeral_expenses,
        "wasiyyah": calculation_input.wasiyyah,
    }
    errors = [FieldError(field=k, message="Must not be negative") for k, v in money.items() if v < 0]
    if errors:
        return _fail(FailureCode.NEGATIVE_OR_INCONSISTENT_ESTATE, "Estate figures must not be negative", errors), {}

    if not selection:
        return _fail(
            FailureCode.NO_ELIGIBLE_HEIRS,
            "No heirs selected",
            [FieldError(field="heirs", message="Select at least one heir")],
        ), {}
    return None, selection


def _estate_warnings(ci: schemas.CalculationInput, limit: int) -> List[str]:
    warnings: List[str] = []
    deductions = ci.debts + ci.funeral_expenses + ci.wasiyyah
    if deductions > ci.estate_value:
        warnings.append(
            f"Deductions ({deductions:,}) exceed the gross estate ({ci.estate_value:,}); net estate set to 0"
        )
    if ci.wasiyyah > limit:
        warnings.append(f"Wasiyyah ({ci.wasiyyah:,}) exceeds the one-third limit ({limit:,})")
    for w in warnings:
        logger.warning(w)
    return warnings


# --------------------------
# 'Ashabah: sisa ke tingkat pertama, bobot 2:1
# --------------------------
def _distribute_residue(table: RuleTable,
                        residuaries: List[FurudhItem],
                        leftover: Fraction) -> Tuple[Dict[HeirType, Fraction], int]:
    residue = {i.heir: ZERO for i in residuaries}
    if not residuaries:
        return residue, 0

    first_tier = min(table.tier_of(i.heir) for i in residuaries)
    takers = [i for i in residuaries if table.tier_of(i.heir) == first_tier]
    for i in residuaries:
        if table.tier_of(i.heir) != first_tier:
            logger.debug("%s: terhalang 'ashabah tingkat lebih dekat, sisa 0", i.heir.value)

    per_head = {i.heir: table.residuary_weights[registry.config_for(i.heir).gender] for i in takers}
    unit = math.gcd(*per_head.values())
    weights = {i.heir: per_head[i.heir] // unit * i.quantity for i in takers}
    total_weight = sum(weights.values())
    if leftover > 0:
        for heir, w in weights.items():
            residue[heir] = leftover * w / total_weight
    return residue, total_weight


# --------------------------
# Aul (Hanafi) & pengurangan berurutan (Shia)
# --------------------------
def _apply_awl(fixed: Dict[HeirType, Fraction], total: Fraction, ashl_awal: int):
    factor = ONE / total
    adjusted = {h: f * factor for h, f in fixed.items()}
    note = (
        f"Awl: fixed shares total {total} exceed the estate; base raised from "
        f"{ashl_awal} to {ashl_awal * total} and every fixed share scaled by {factor}"
    )
    return adjusted, factor, note


def _apply_abatement(table: RuleTable, fixed: Dict[HeirType, Fraction], total: Fraction):
    excess = total - ONE
    adjusted = dict(fixed)
    reduced: List[HeirType] = []
    for heir in table.oversubscription.abatement_order:
        if excess == 0:
            break
        if adjusted.get(heir, ZERO) == 0:
            continue
        cut = min(excess, adjusted[heir])
        adjusted[heir] -= cut
        excess -= cut
        reduced.append(heir)

    if excess != 0:
        logger.error("Pengurangan berurutan tidak menutup kelebihan %s (tabel %s)", excess, table.school.value)
        raise ShareInvariantError(
            f"Abatement could not absorb the excess of {total - ONE} for school {table.school.value}"
        )

    before = sum((fixed[h] for h in reduced), ZERO)
    after = sum((adjusted[h] for h in reduced), ZERO)
    factor = after / before
    names = ", ".join(registry.label_for(h) for h in reduced)
    note = (
        f"Abatement: fixed shares total {total}; the excess {total - ONE} is taken from {names} "
        f"({before} reduced to {after})"
    )
    return adjusted, factor, note


# --------------------------
# Radd
# --------------------------
def _apply_radd(table: RuleTable, fixed: Dict[HeirType, Fraction], total: Fraction):
    spouse_total = sum((f for h, f in fixed.items() if h in SPOUSES), ZERO)
    others_total = total - spouse_total

    if table.radd.exclude_spouse and spouse_total and others_total:
        # pasangan tetap dengan furudh-nya, sisa dikembalikan ke ahli waris lain
        factor = (ONE - spouse_total) / others_total
        adjusted = {h: (f if h in SPOUSES else f * factor) for h, f in fixed.items()}
        note = (
            f"Radd: surplus {ONE - total} returned to the fixed-share holders other than the spouse; "
            f"their shares scaled by {factor}"
        )
    else:
        factor = ONE / total
        adjusted = {h: f * factor for h, f in fixed.items()}
        note = f"Radd: surplus {ONE - total} returned to all fixed-share holders; shares scaled by {factor}"
    return adjusted, factor, note


# ============================================================
#                    SOLVER
# ============================================================
def solve_shares(table: RuleTable, items: List[FurudhItem]) -> _Solved:
    """
    Unsolved -> FixedSharesAssigned -> Balanced | Oversubscribed | Undersubscribed -> Finalized.
    Semua aritmetika memakai Fraction (tanpa pembulatan).
    """
    fixed = {i.heir: i.fraction for i in items if i.fraction is not None}
    residuaries = [i for i in items if i.residuary]
    fixed_total = sum(fixed.values(), ZERO)
    logger.debug("%s: total furudh %s, %d 'ashabah", SolverState.FIXED_SHARES_ASSIGNED.value,
                 fixed_total, len(residuaries))

    adjusted = dict(fixed)
    has_awl = has_radd = False
    note: Optional[str] = None
    factor: Optional[Fraction] = None
    leftover = ZERO

    if fixed_total > 1:
        subscription = SolverState.OVERSUBSCRIBED
        if table.oversubscription.method == "proportional":
            ashl_awal = compute_ashl([f.denominator for f in fixed.values()]).ashl_awal
            adjusted, factor, note = _apply_awl(fixed, fixed_total, ashl_awal)
            has_awl = True
        else:
            adjusted, factor, note = _apply_abatement(table, fixed, fixed_total)
        residue, weight = _distribute_residue(table, residuaries, ZERO)
    elif fixed_total == 1 or residuaries:
        subscription = SolverState.BALANCED
        leftover = ONE - fixed_total
        residue, weight = _distribute_residue(table, residuaries, leftover)
    else:
        subscription = SolverState.UNDERSUBSCRIBED
        adjusted, factor, note = _apply_radd(table, fixed, fixed_total)
        residue, weight = {}, 0
        has_radd = True
    logger.debug("%s%s", subscription.value, f": {note}" if note else "")

    final: Dict[HeirType, Fraction] = {}
    for i in items:
        final[i.heir] = adjusted.get(i.heir, ZERO) + residue.get(i.heir, ZERO)

    total = sum(final.values(), ZERO)
    if total != 1:
        logger.error("Jumlah bagian final %s != 1 (%s)", total, {h.value: str(f) for h, f in final.items()})
        raise ShareInvariantError(f"Final shares sum to {total}, expected 1")
    logger.debug("%s", SolverState.FINALIZED.value)

    return _Solved(
        final=final,
        fixed=fixed,
        residue=residue,
        subscription=subscription,
        fixed_total=fixed_total,
        leftover=leftover,
        has_awl=has_awl,
        has_radd=has_radd,
        note=note,
        factor=factor,
        residue_weight=weight,
    )


# --------------------------
# Aslul Mas'alah & tashih
# --------------------------
def _problem_base(items: List[FurudhItem], solved: _Solved) -> schemas.AshlInfo:
    ashl = compute_ashl([f.denominator for f in solved.fixed.values()])
    ashl_awal = ashl.ashl_awal
    if not solved.fixed:
        # semua 'ashabah: base = total bobot kepala
        ashl_awal = max(solved.residue_weight, 1)

    if solved.has_awl:
        ashl_akhir = int(ashl_awal * solved.fixed_total)
    elif solved.factor is not None:
        # radd / pengurangan berurutan
        ashl_akhir = base_of(solved.final.values())
    else:
        ashl_akhir = ashl_awal

    # inkisar sisa/radd: saham belum bulat pada base akhir
    units = {i.heir: solved.final[i.heir] * ashl_akhir for i in items}
    k = base_of(units.values())
    groups = [(i.heir.value, i.quantity, int(units[i.heir] * k)) for i in items]
    tashih = k * compute_tashih(groups)

    return ashl.model_copy(update={
        "ashl_awal": ashl_awal,
        "ashl_akhir": ashl_akhir,
        "tashih": tashih,
        "corrected_base": ashl_akhir * tashih,
    })


# ============================================================
#                    FUNGSI UTAMA
# ============================================================
def calculate_inheritance(calculation_input: schemas.CalculationInput,
                          settings: Optional[Settings] = None) -> schemas.CalculationOutcome:
    """
    Hitung pembagian waris. Return InheritanceResult, atau ValidationFailure bila input tidak valid.
    ShareInvariantError / RuleTableError = kesalahan program atau tabel, di-raise.
    """
    settings = settings or get_settings()
    failure, selection = validate_input(calculation_input, settings)
    if failure is not None:
        return failure

    ci = calculation_input
    table = load_rule_table(ci.school, settings.rules_dir or str(RULES_DIR))

    # 1) Harta bersih
    limit = wasiyyah_limit(ci.estate_value, ci.debts, ci.funeral_expenses)
    net = net_estate(ci.estate_value, ci.debts, ci.funeral_expenses, ci.wasiyyah)
    warnings = _estate_warnings(ci, limit)

    # 2) Hijab
    outcome = resolve_blocking(table, ci.deceased_gender, selection)
    if not outcome.eligible:
        return _fail(
            FailureCode.NO_ELIGIBLE_HEIRS,
            "Every selected heir is blocked",
            [FieldError(field=f"heirs.{b.heir.value}", message=f"Blocked by {b.blocked_by}") for b in outcome.blocked],
        )

    # 3) Furudh, 'ashabah, aul / radd
    comp = Composition(selection, outcome.eligible, table.pools)
    items = determine_furudh(table, comp)
    solved = solve_shares(table, items)

    # 4) Aslul mas'alah
    ashl = _problem_base(items, solved)

    # 5) Nominal
    amounts = allocate(net, [(solved.final[i.heir], i.quantity) for i in items])

    shares: List[schemas.HeirShareResult] = []
    for item, (total_amount, per_person, pct) in zip(items, amounts):
        final = solved.final[item.heir]
        shares.append(schemas.HeirShareResult(
            heir=item.heir,
            label=registry.label_for(item.heir),
            count=item.quantity,
            fixed_fraction=schemas.ShareFraction.of(item.fraction) if item.fraction is not None else None,
            is_residuary=item.residuary,
            residue_fraction=(
                schemas.ShareFraction.of(solved.residue.get(item.heir, ZERO)) if item.residuary else None
            ),
            fraction=schemas.ShareFraction.of(final),
            share_percentage=pct,
            total_amount=total_amount,
            per_person_amount=per_person,
            saham=int(final * ashl.corrected_base),
            basis=item.reason,
        ))

    return schemas.InheritanceResult(
        school=ci.school,
        deceased_gender=ci.deceased_gender,
        gross_estate=ci.estate_value,
        debts=ci.debts,
        funeral_expenses=ci.funeral_expenses,
        wasiyyah=ci.wasiyyah,
        wasiyyah_limit=limit,
        net_estate=net,
        shares=shares,
        blocked_heirs=outcome.blocked,
        has_awl=solved.has_awl,
        has_radd=solved.has_radd,
        adjustment_note=solved.note,
        adjustment_factor=schemas.ShareFraction.of(solved.factor) if solved.factor is not None else None,
        subscription=solved.subscription,
        residuary_weights=dict(table.residuary_weights),
        fixed_total=schemas.ShareFraction.of(solved.fixed_total),
        residue=schemas.ShareFraction.of(solved.leftover),
        ashl=ashl,
        warnings=warnings,
    )
