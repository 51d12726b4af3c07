# Di dalam file: test_blocking.py

import pytest

from app.rules.blocking import resolve_blocking
from app.rules.loader import load_rule_table
from schemas import Gender, HeirType, School

H = HeirType


def blocking(selection, school=School.HANAFI, gender=Gender.MALE):
    return resolve_blocking(load_rule_table(school), gender, selection)


class TestBlockingResolver:

    def test_tanpa_hijab(self):
        outcome = blocking({H.SON: 2, H.DAUGHTER: 1, H.MOTHER: 1})
        assert outcome.eligible == {H.SON: 2, H.DAUGHTER: 1, H.MOTHER: 1}
        assert outcome.blocked == []

    def test_partisi_selected(self):
        selection = {H.FATHER: 1, H.PATERNAL_GRANDFATHER: 1, H.FULL_BROTHER: 3, H.MOTHER: 1,
                     H.MATERNAL_GRANDMOTHER: 1}
        outcome = blocking(selection)
        blocked = {b.heir for b in outcome.blocked}
        assert set(outcome.eligible) | blocked == set(selection)
        assert not set(outcome.eligible) & blocked
        assert set(outcome.eligible) == {H.FATHER, H.MOTHER}

    def test_jumlah_orang_yang_mahjub_dicatat(self):
        outcome = blocking({H.FATHER: 1, H.FULL_BROTHER: 3})
        assert outcome.blocked[0].count == 3
        assert outcome.blocked[0].label == "Full Brother"

    def test_urutan_output_kanonik(self):
        outcome = blocking({H.MATERNAL_HALF_SISTER: 1, H.FULL_BROTHER: 1, H.SONS_SON: 1, H.SON: 1})
        assert [b.heir for b in outcome.blocked] == [H.SONS_SON, H.FULL_BROTHER, H.MATERNAL_HALF_SISTER]

    def test_sebab_terakhir_menang(self):
        outcome = blocking({H.SON: 1, H.FATHER: 1, H.MATERNAL_HALF_BROTHER: 1, H.DAUGHTER: 1})
        mhb = next(b for b in outcome.blocked if b.heir == H.MATERNAL_HALF_BROTHER)
        assert mhb.rule == "father-blocks"
        assert mhb.blocked_by == "Father"

    def test_kakek_mahjub_tidak_menghalangi_saudara(self):
        # kakek sendiri mahjub oleh ayah, aturan kakek tidak berlaku
        outcome = blocking({H.FATHER: 1, H.PATERNAL_GRANDFATHER: 1, H.FULL_SISTER: 1})
        fs = next(b for b in outcome.blocked if b.heir == H.FULL_SISTER)
        assert fs.rule == "father-blocks"

    def test_kakek_menghalangi_saudara_hanafi(self):
        outcome = blocking({H.PATERNAL_GRANDFATHER: 1, H.FULL_BROTHER: 1})
        assert outcome.eligible == {H.PATERNAL_GRANDFATHER: 1}

    def test_kakek_tidak_menghalangi_saudara_shia(self):
        outcome = blocking({H.PATERNAL_GRANDFATHER: 1, H.FULL_BROTHER: 1}, school=School.SHIA)
        assert outcome.blocked == []

    def test_kelas_shia(self):
        outcome = blocking({H.DAUGHTER: 1, H.PATERNAL_GRANDMOTHER: 1, H.MATERNAL_HALF_SISTER: 2},
                           school=School.SHIA)
        assert outcome.eligible == {H.DAUGHTER: 1}
        assert {b.rule for b in outcome.blocked} == {"class-one-blocks-class-two"}

    def test_ahli_waris_tidak_berlaku(self):
        with pytest.raises(ValueError):
            blocking({H.HUSBAND: 1}, gender=Gender.MALE)

    def test_deterministik(self):
        selection = {H.SON: 1, H.SONS_DAUGHTER: 2, H.FULL_SISTER: 1, H.MOTHER: 1}
        assert blocking(selection) == blocking(dict(reversed(list(selection.items()))))
