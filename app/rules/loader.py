# app/rules/loader.py

import json
import logging
from fractions import Fraction
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from app.rules.conditions import SCOPE_ELIGIBLE, parse_condition
from schemas import Gender, HeirType, School

logger = logging.getLogger(__name__)

RULES_DIR = Path(__file__).parent


class RuleTableError(RuntimeError):
    """Tabel aturan rusak / tidak konsisten (kesalahan konfigurasi, bukan input)."""


def load_json(path: str) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _check_conditions(values: List[str]) -> List[str]:
    for text in values:
        parse_condition(text)
    return values


# =========================
# Model tabel aturan
# =========================
class Pool(BaseModel):
    model_config = ConfigDict(frozen=True)

    members: Dict[HeirType, int]
    scope: Literal["eligible", "selected"] = SCOPE_ELIGIBLE


class BlockingRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    blocked: List[HeirType]
    by: str                                  # heir type atau "@pool"
    when: List[str] = []
    cause: str
    blocker_must_be_eligible: bool = False

    @field_validator("when")
    @classmethod
    def check_when(cls, v: List[str]) -> List[str]:
        return _check_conditions(v)

    @field_validator("by")
    @classmethod
    def check_by(cls, v: str) -> str:
        if not v.startswith("@"):
            HeirType(v)
        return v

    @property
    def conditions(self):
        return [parse_condition(c) for c in self.when]


class ShareClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    when: List[str] = []
    count: Optional[Literal["single", "plural"]] = None
    pool: Optional[str] = None               # bagian golongan dibagi per kepala
    fraction: Optional[str] = None
    residuary: bool = False
    basis: str

    @field_validator("when")
    @classmethod
    def check_when(cls, v: List[str]) -> List[str]:
        return _check_conditions(v)

    @field_validator("fraction")
    @classmethod
    def check_fraction(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            f = Fraction(v)
            if not (0 < f <= 1):
                raise ValueError(f"Pecahan di luar (0, 1]: {v}")
        return v

    @model_validator(mode="after")
    def fraction_or_residue(self):
        if self.fraction is None and not self.residuary:
            raise ValueError("Klausa harus punya fraction atau residuary")
        return self

    @property
    def conditions(self):
        return [parse_condition(c) for c in self.when]

    @property
    def share(self) -> Optional[Fraction]:
        return Fraction(self.fraction) if self.fraction is not None else None


class OversubscriptionPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: Literal["proportional", "abatement"]
    abatement_order: List[HeirType] = []


class RaddPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    exclude_spouse: bool


class RuleTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    school: School
    title: str
    pools: Dict[str, Pool]
    blocking: List[BlockingRule]
    blocking_precedence: List[str]
    shares: Dict[HeirType, List[ShareClause]]
    residuary_tiers: List[List[HeirType]]
    residuary_weights: Dict[Gender, int]
    oversubscription: OversubscriptionPolicy
    radd: RaddPolicy

    @model_validator(mode="after")
    def check_consistency(self):
        ids = [r.id for r in self.blocking]
        if len(set(ids)) != len(ids):
            raise ValueError("id aturan hijab ganda")
        if sorted(self.blocking_precedence) != sorted(ids):
            raise ValueError("blocking_precedence harus menyebut setiap aturan hijab tepat satu kali")

        missing = [h.value for h in HeirType if h not in self.shares]
        if missing:
            raise ValueError(f"Tidak ada klausa bagian untuk: {', '.join(missing)}")

        refs = [r.by[1:] for r in self.blocking if r.by.startswith("@")]
        for r in self.blocking:
            refs += [c.name for c in r.conditions if c.is_pool]
        for clauses in self.shares.values():
            for c in clauses:
                refs += [p.name for p in c.conditions if p.is_pool]
                if c.pool:
                    refs.append(c.pool)
        unknown = sorted(set(refs) - set(self.pools))
        if unknown:
            raise ValueError(f"Pool tidak dikenal: {', '.join(unknown)}")

        tiered = {h for tier in self.residuary_tiers for h in tier}
        for heir, clauses in self.shares.items():
            if any(c.residuary for c in clauses) and heir not in tiered:
                raise ValueError(f"{heir.value} bisa menjadi 'ashabah tapi tidak ada di residuary_tiers")
        return self

    def ordered_blocking(self) -> List[BlockingRule]:
        by_id = {r.id: r for r in self.blocking}
        return [by_id[i] for i in self.blocking_precedence]

    def tier_of(self, heir: HeirType) -> int:
        for i, tier in enumerate(self.residuary_tiers):
            if heir in tier:
                return i
        return len(self.residuary_tiers)


# =========================
# Loader
# =========================
@lru_cache(maxsize=None)
def _load_cached(school: School, rules_dir: str) -> RuleTable:
    path = Path(rules_dir) / f"{school.value}.json"
    try:
        table = RuleTable.model_validate(load_json(str(path)))
    except (OSError, json.JSONDecodeError) as e:
        raise RuleTableError(f"Gagal membaca tabel aturan {path}: {e}") from e
    except ValidationError as e:
        raise RuleTableError(f"Tabel aturan {path} tidak valid: {e}") from e
    if table.school != school:
        raise RuleTableError(f"{path} berisi aturan mazhab {table.school.value}, bukan {school.value}")
    logger.debug("Tabel aturan %s dimuat dari %s (%d aturan hijab)", school.value, path, len(table.blocking))
    return table


def load_rule_table(school: School, rules_dir: Optional[str] = None) -> RuleTable:
    if rules_dir is None:
        from config import get_settings
        rules_dir = get_settings().rules_dir or str(RULES_DIR)
    return _load_cached(School(school), str(rules_dir))
