# app/rules/registry.py

from typing import Dict, List

from schemas import Applicability, Gender, HeirConfig, HeirGroup, HeirType

A = Applicability
G = HeirGroup


def _cfg(type_, label, group, gender, applicable, max_count) -> HeirConfig:
    return HeirConfig(
        type=type_,
        label=label,
        group=group,
        gender=gender,
        applicable_deceased_gender=applicable,
        allow_multiple=max_count > 1,
        max_count=max_count,
    )


# =========================
# Katalog ahli waris (urutan = urutan tampil & urutan output)
# =========================
HEIR_CONFIGS: List[HeirConfig] = [
    # Pasangan
    _cfg(HeirType.HUSBAND, "Husband", G.SPOUSE, Gender.MALE, A.FEMALE, 1),
    _cfg(HeirType.WIFE, "Wife", G.SPOUSE, Gender.FEMALE, A.MALE, 4),
    # Orang tua
    _cfg(HeirType.FATHER, "Father", G.PARENTS, Gender.MALE, A.BOTH, 1),
    _cfg(HeirType.MOTHER, "Mother", G.PARENTS, Gender.FEMALE, A.BOTH, 1),
    # Kakek / nenek
    _cfg(HeirType.PATERNAL_GRANDFATHER, "Paternal Grandfather", G.GRANDPARENTS, Gender.MALE, A.BOTH, 1),
    _cfg(HeirType.PATERNAL_GRANDMOTHER, "Paternal Grandmother", G.GRANDPARENTS, Gender.FEMALE, A.BOTH, 1),
    _cfg(HeirType.MATERNAL_GRANDMOTHER, "Maternal Grandmother", G.GRANDPARENTS, Gender.FEMALE, A.BOTH, 1),
    # Anak
    _cfg(HeirType.SON, "Son", G.CHILDREN, Gender.MALE, A.BOTH, 20),
    _cfg(HeirType.DAUGHTER, "Daughter", G.CHILDREN, Gender.FEMALE, A.BOTH, 20),
    # Cucu (dari anak laki-laki)
    _cfg(HeirType.SONS_SON, "Son's Son", G.GRANDCHILDREN, Gender.MALE, A.BOTH, 20),
    _cfg(HeirType.SONS_DAUGHTER, "Son's Daughter", G.GRANDCHILDREN, Gender.FEMALE, A.BOTH, 20),
    # Saudara
    _cfg(HeirType.FULL_BROTHER, "Full Brother", G.SIBLINGS, Gender.MALE, A.BOTH, 20),
    _cfg(HeirType.FULL_SISTER, "Full Sister", G.SIBLINGS, Gender.FEMALE, A.BOTH, 20),
    _cfg(HeirType.PATERNAL_HALF_BROTHER, "Paternal Half-Brother", G.SIBLINGS, Gender.MALE, A.BOTH, 20),
    _cfg(HeirType.PATERNAL_HALF_SISTER, "Paternal Half-Sister", G.SIBLINGS, Gender.FEMALE, A.BOTH, 20),
    _cfg(HeirType.MATERNAL_HALF_BROTHER, "Maternal Half-Brother", G.SIBLINGS, Gender.MALE, A.BOTH, 20),
    _cfg(HeirType.MATERNAL_HALF_SISTER, "Maternal Half-Sister", G.SIBLINGS, Gender.FEMALE, A.BOTH, 20),
]

_BY_TYPE: Dict[HeirType, HeirConfig] = {c.type: c for c in HEIR_CONFIGS}

# urutan kanonik, dipakai agar output deterministik
HEIR_ORDER: Dict[HeirType, int] = {c.type: i for i, c in enumerate(HEIR_CONFIGS)}


def config_for(heir_type: HeirType) -> HeirConfig:
    """KeyError untuk tipe yang tidak dikenal (kesalahan program, bukan input)."""
    return _BY_TYPE[heir_type]


def label_for(heir_type: HeirType) -> str:
    return config_for(heir_type).label


def by_group(group: HeirGroup) -> List[HeirConfig]:
    return [c for c in HEIR_CONFIGS if c.group == group]


def applicable_for(deceased_gender: Gender) -> List[HeirConfig]:
    """Ahli waris yang mungkin ada untuk pewaris laki-laki / perempuan."""
    return [
        c for c in HEIR_CONFIGS
        if c.applicable_deceased_gender == Applicability.BOTH
        or c.applicable_deceased_gender.value == Gender(deceased_gender).value
    ]


def is_applicable(heir_type: HeirType, deceased_gender: Gender) -> bool:
    cfg = config_for(heir_type)
    return cfg.applicable_deceased_gender in (Applicability.BOTH, Applicability(Gender(deceased_gender).value))
