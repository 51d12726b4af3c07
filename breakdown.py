# breakdown.py

from typing import List

from app.rules import registry
from schemas import BreakdownStep, Gender, HeirShareResult, InheritanceResult, SolverState


def _money(x: int) -> str:
    return f"{x:,}"


def _split_rule(result: InheritanceResult, takers: List[HeirShareResult]) -> str:
    """Aturan pembagian sisa, dari bobot tabel aturan dan jenis kelamin penerima."""
    genders = {registry.config_for(s.heir).gender for s in takers}
    if len(genders) < 2:
        return "split equally per head"
    male = result.residuary_weights.get(Gender.MALE, 1)
    female = result.residuary_weights.get(Gender.FEMALE, 1)
    return f"split {male}:{female} male to female"


def _adjustment_label(result: InheritanceResult) -> str:
    if result.has_awl:
        return "Awl (proportional reduction)"
    if result.has_radd:
        return "Radd (return of surplus)"
    return "Abatement"


def get_inheritance_breakdown(result: InheritanceResult) -> List[BreakdownStep]:
    """
    Jejak perhitungan langkah demi langkah dari sebuah InheritanceResult.
    Murni proyeksi: tidak menghitung ulang apa pun.
    Urutan: tirkah -> potongan -> tirkah bersih -> peringatan -> mahjub -> furudh
            -> sisa ('ashabah) -> aul/radd -> aslul mas'alah -> bagian akhir.
    """
    steps: List[BreakdownStep] = []

    def add(label: str, calculation: str, value: str) -> None:
        steps.append(BreakdownStep(step=len(steps) + 1, label=label, calculation=calculation, result=value))

    deductions = result.debts + result.funeral_expenses + result.wasiyyah
    add("Gross estate", "Total assets of the deceased", _money(result.gross_estate))
    add(
        "Deductions",
        f"Debts {_money(result.debts)} + funeral expenses {_money(result.funeral_expenses)} "
        f"+ wasiyyah {_money(result.wasiyyah)}",
        _money(deductions),
    )
    add("Net estate", f"{_money(result.gross_estate)} - {_money(deductions)}", _money(result.net_estate))

    # --- Peringatan (dibaca dari field hasil, bukan teks) ---
    if deductions > result.gross_estate:
        add(
            "Warning",
            f"Deductions {_money(deductions)} exceed the gross estate {_money(result.gross_estate)}; "
            f"net estate set to 0",
            f"Net estate {_money(result.net_estate)}",
        )
    if result.wasiyyah > result.wasiyyah_limit:
        add(
            "Warning",
            f"Wasiyyah {_money(result.wasiyyah)} exceeds the one-third limit {_money(result.wasiyyah_limit)}",
            f"Wasiyyah limit {_money(result.wasiyyah_limit)}",
        )

    # --- Mahjub ---
    for b in result.blocked_heirs:
        add(f"{b.label} blocked", b.blocked_by, "0")

    # --- Furudh ---
    for s in result.shares:
        if s.fixed_fraction is not None:
            add(f"Fixed share: {s.label} (x{s.count})", s.basis, s.fixed_fraction.display)

    # --- 'Ashabah ---
    residuaries = [s for s in result.shares if s.is_residuary]
    if residuaries:
        fixed = result.fixed_total.display
        names = ", ".join(f"{s.label} (x{s.count})" for s in residuaries)
        if result.subscription == SolverState.OVERSUBSCRIBED:
            calculation = f"Fixed shares total {fixed} exceed the estate ({fixed} > 1); residuaries receive nothing: {names}"
        elif result.residue.numerator == 0:
            calculation = f"1 - {fixed} = 0; nothing is left for the residuaries: {names}"
        else:
            split = ", ".join(
                f"{s.label} (x{s.count}) {s.residue_fraction.display if s.residue_fraction else '0/1'}"
                for s in residuaries
            )
            takers = [s for s in residuaries if s.residue_fraction and s.residue_fraction.numerator]
            calculation = f"1 - {fixed} = {result.residue.display}; {_split_rule(result, takers)}: {split}"
        add("Residue", calculation, result.residue.display)

    # --- Aul / Radd / pengurangan ---
    if result.adjustment_note:
        add(
            _adjustment_label(result),
            result.adjustment_note,
            f"factor {result.adjustment_factor.display}" if result.adjustment_factor else "-",
        )

    ashl = result.ashl
    add(
        "Base of the problem",
        f"Initial base {ashl.ashl_awal}, final base {ashl.ashl_akhir}, correction x{ashl.tashih}",
        str(ashl.corrected_base),
    )

    # --- Bagian akhir ---
    for s in result.shares:
        per_person = f" ({_money(s.per_person_amount)} each)" if s.count > 1 else ""
        add(
            f"{s.label} (x{s.count})",
            f"{s.fraction.display} x {_money(result.net_estate)} ({s.saham}/{ashl.corrected_base} units, "
            f"{s.share_percentage}%)",
            f"{_money(s.total_amount)}{per_person}",
        )
    return steps
