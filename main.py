# Di dalam file: main.py

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import calculator
import schemas
from app.rules import registry
from config import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Faraid Distribution Engine",
    description="API untuk perhitungan waris Islam mazhab Hanafi dan Shia Ja'fari.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _calculate_or_422(payload: schemas.CalculationInput) -> schemas.InheritanceResult:
    logger.debug("Perhitungan %s, pewaris %s, %d tipe ahli waris",
                 payload.school.value, payload.deceased_gender.value, len(payload.heirs))
    outcome = calculator.calculate_inheritance(payload, settings=get_settings())
    if isinstance(outcome, schemas.ValidationFailure):
        raise HTTPException(status_code=422, detail=outcome.model_dump(mode="json"))
    return outcome


@app.get("/")
def read_root():
    """
    Endpoint utama untuk menyapa pengguna.
    """
    return {"message": "Welcome to the Faraid Distribution Engine"}


@app.get("/heirs/", response_model=List[schemas.HeirConfig])
def read_heirs(deceased_gender: Optional[schemas.Gender] = None,
               group: Optional[schemas.HeirGroup] = None):
    """
    Daftar ahli waris dari registry, bisa difilter menurut jenis kelamin pewaris dan golongan.
    """
    heirs = registry.by_group(group) if group is not None else list(registry.HEIR_CONFIGS)
    if deceased_gender is not None:
        heirs = [h for h in heirs if registry.is_applicable(h.type, deceased_gender)]
    return heirs


@app.post("/calculate/", response_model=schemas.InheritanceResult)
def run_calculation(calculation_data: schemas.CalculationInput):
    """
    Endpoint utama untuk menjalankan perhitungan Faraidh.
    Input tidak valid -> 422 dengan body ValidationFailure.
    """
    return _calculate_or_422(calculation_data)


@app.post("/calculate/breakdown/", response_model=List[schemas.BreakdownStep])
def run_breakdown(calculation_data: schemas.CalculationInput):
    """Jejak perhitungan langkah demi langkah."""
    result = _calculate_or_422(calculation_data)
    return calculator.get_inheritance_breakdown(result)
