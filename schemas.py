# schemas.py

from __future__ import annotations

from enum import Enum
from fractions import Fraction
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Enumerasi dasar ---
class School(str, Enum):
    HANAFI = "hanafi"
    SHIA = "shia"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class Applicability(str, Enum):
    MALE = "male"
    FEMALE = "female"
    BOTH = "both"


class HeirGroup(str, Enum):
    SPOUSE = "spouse"
    PARENTS = "parents"
    GRANDPARENTS = "grandparents"
    CHILDREN = "children"
    GRANDCHILDREN = "grandchildren"
    SIBLINGS = "siblings"


class HeirType(str, Enum):
    HUSBAND = "husband"
    WIFE = "wife"
    FATHER = "father"
    MOTHER = "mother"
    PATERNAL_GRANDFATHER = "paternal-grandfather"
    PATERNAL_GRANDMOTHER = "paternal-grandmother"
    MATERNAL_GRANDMOTHER = "maternal-grandmother"
    SON = "son"
    DAUGHTER = "daughter"
    SONS_SON = "sons-son"
    SONS_DAUGHTER = "sons-daughter"
    FULL_BROTHER = "full-brother"
    FULL_SISTER = "full-sister"
    PATERNAL_HALF_BROTHER = "paternal-half-brother"
    PATERNAL_HALF_SISTER = "paternal-half-sister"
    MATERNAL_HALF_BROTHER = "maternal-half-brother"
    MATERNAL_HALF_SISTER = "maternal-half-sister"


class SolverState(str, Enum):
    UNSOLVED = "unsolved"
    FIXED_SHARES_ASSIGNED = "fixed-shares-assigned"
    BALANCED = "balanced"
    OVERSUBSCRIBED = "oversubscribed"    # Awl / abatement
    UNDERSUBSCRIBED = "undersubscribed"  # Radd
    FINALIZED = "finalized"


class FailureCode(str, Enum):
    INVALID_HEIR_SELECTION = "InvalidHeirSelection"
    NO_ELIGIBLE_HEIRS = "NoEligibleHeirs"
    NEGATIVE_OR_INCONSISTENT_ESTATE = "NegativeOrInconsistentEstate"


# --- Skema Registry Ahli Waris ---
class HeirConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: HeirType
    label: str
    group: HeirGroup
    gender: Gender                          # dipakai untuk bobot 'ashabah 2:1
    applicable_deceased_gender: Applicability
    allow_multiple: bool
    max_count: int


# --- Skema Input untuk Kalkulasi ---
class CalculationInput(BaseModel):
    school: School
    deceased_gender: Gender
    heirs: Dict[str, int] = Field(default_factory=dict)  # heir type -> jumlah orang
    estate_value: int            # semua nominal dalam satuan mata uang terkecil
    debts: int = 0
    funeral_expenses: int = 0
    wasiyyah: int = 0


# --- Pecahan bagian (bentuk output dari Fraction) ---
class ShareFraction(BaseModel):
    model_config = ConfigDict(frozen=True)

    numerator: int
    denominator: int
    display: str                 # misal "1/8"

    @classmethod
    def of(cls, value: Fraction) -> "ShareFraction":
        return cls(
            numerator=value.numerator,
            denominator=value.denominator,
            display=f"{value.numerator}/{value.denominator}",
        )

    def as_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)


# --- Item furudh internal (hasil lookup tabel) ---
class FurudhItem(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    heir: HeirType
    quantity: int
    fraction: Optional[Fraction] = None  # None = murni 'ashabah
    residuary: bool = False              # True = ikut mengambil sisa
    reason: str


class BlockedHeir(BaseModel):
    model_config = ConfigDict(frozen=True)

    heir: HeirType
    label: str
    count: int
    blocked_by: str              # sebab hijab (tidak digabung)
    rule: str                    # id aturan di tabel


# --- Skema untuk Aslul Mas'alah ---
class ComparisonItem(BaseModel):
    a: int                       # penyebut pertama
    b: int                       # penyebut kedua
    relation: str                # identical, nested, compatible, coprime
    lcm: Optional[int] = None


class AshlInfo(BaseModel):
    ashl_awal: int               # base sebelum Awl/Radd
    ashl_akhir: int              # base setelah Awl/Radd
    tashih: int = 1              # pengali koreksi (inkisar)
    corrected_base: int          # ashl_akhir x tashih
    comparisons: List[ComparisonItem] = Field(default_factory=list)


# --- Skema Output untuk Setiap Ahli Waris ---
class HeirShareResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    heir: HeirType
    label: str
    count: int
    fixed_fraction: Optional[ShareFraction] = None   # bagian Qur'ani sebelum penyesuaian
    is_residuary: bool = False
    residue_fraction: Optional[ShareFraction] = None  # porsi dari sisa
    fraction: ShareFraction                           # bagian final
    share_percentage: float
    total_amount: int
    per_person_amount: int
    saham: int                                        # unit dari corrected_base
    basis: str


class InheritanceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["result"] = "result"
    school: School
    deceased_gender: Gender
    gross_estate: int
    debts: int
    funeral_expenses: int
    wasiyyah: int
    wasiyyah_limit: int
    net_estate: int
    shares: List[HeirShareResult]
    blocked_heirs: List[BlockedHeir]
    has_awl: bool
    has_radd: bool
    adjustment_note: Optional[str] = None
    adjustment_factor: Optional[ShareFraction] = None
    subscription: SolverState
    residuary_weights: Dict[Gender, int] = Field(default_factory=dict)  # bobot per kepala, dari tabel aturan
    fixed_total: ShareFraction
    residue: ShareFraction
    ashl: AshlInfo
    warnings: List[str] = Field(default_factory=list)


# --- Skema kegagalan validasi ---
class FieldError(BaseModel):
    field: str
    message: str


class ValidationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    code: FailureCode
    message: str
    errors: List[FieldError] = Field(default_factory=list)


CalculationOutcome = Union[InheritanceResult, ValidationFailure]


# --- Skema untuk Jejak Perhitungan (Breakdown) ---
class BreakdownStep(BaseModel):
    step: int
    label: str
    calculation: str
    result: str
