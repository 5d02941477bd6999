"""Tests for back-side address extraction."""

import pytest

from cedula_ocr.extraction.back_parser import (
    BackSideParser,
    clean_address_line,
    is_degenerate,
    is_mrz_line,
)
from cedula_ocr.utils.config import ExtractionConfig

MRZ_NAMES = "PEREZ<GOMEZ<<JUAN<CARLOS<<<<<<<"


@pytest.fixture
def parser() -> BackSideParser:
    return BackSideParser()


class TestLineHelpers:
    """Tests for address line classification and cleaning."""

    def test_mrz_line(self) -> None:
        assert is_mrz_line(MRZ_NAMES)
        assert is_mrz_line("IDDOM0011234567<<<<<<<<<<<<<<<")

    def test_short_or_plain_lines_not_mrz(self) -> None:
        assert not is_mrz_line("<<<ABC")
        assert not is_mrz_line("LOS ALCARRIZOS ABAJO NORTE")

    @pytest.mark.parametrize("line", ["AB", "1234 5678 A", "12-34-56-X"])
    def test_degenerate(self, line: str) -> None:
        assert is_degenerate(line)

    def test_not_degenerate(self) -> None:
        assert not is_degenerate("CALLE")

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("SECTOR LOS RIOS -", "LOS RIOS"),
            ("MUNICIPIO SANTO DOMINGO ESTE", "SANTO DOMINGO ESTE"),
            ("R.D. SANTIAGO", "SANTIAGO"),
            ("|<CALLE 5>|", "CALLE 5"),
            ("DUARTE  #  ", "DUARTE"),
        ],
    )
    def test_clean(self, line: str, expected: str) -> None:
        assert clean_address_line(line) == expected

    @pytest.mark.parametrize("line", ["##", "123", "SECTOR "])
    def test_clean_nothing_left(self, line: str) -> None:
        assert clean_address_line(line) is None


class TestFindAnchor:
    """Tests for locating the address label."""

    def test_most_specific_anchor_wins(self) -> None:
        lines = ["RESIDENCIA", "OTRO", "DIRECCION DE RESIDENCIA", "DUARTE"]
        assert BackSideParser.find_anchor(lines) == 2

    def test_ocr_confusions(self) -> None:
        assert BackSideParser.find_anchor(["X", "DIRECC1ON DE RES1DENC1A"]) == 1

    def test_accented_label(self) -> None:
        assert BackSideParser.find_anchor(["DIRECCIÓN"]) == 0

    def test_missing(self) -> None:
        assert BackSideParser.find_anchor(["COLEGIO 0123", "DUARTE"]) is None


class TestAnchoredAddress:
    """Tests for addresses read under the label."""

    def test_full_back(self, parser: BackSideParser, back_text: str) -> None:
        result = parser.parse(back_text)
        assert result.address == "DUARTE, RINCON, JIMA ABAJO"
        assert result.error is None
        assert result.first_name is None

    def test_lowercase_input(self, parser: BackSideParser, back_text: str) -> None:
        assert parser.parse(back_text.lower()).address == "DUARTE, RINCON, JIMA ABAJO"

    def test_at_most_three_parts(self, parser: BackSideParser) -> None:
        text = "DIRECCION\nDUARTE\nRINCON\nJIMA ABAJO\nOTRA COSA"
        assert parser.parse(text).address == "DUARTE, RINCON, JIMA ABAJO"

    def test_duplicates_dropped(self, parser: BackSideParser) -> None:
        text = "DIRECCION\nDUARTE\nDUARTE\nRINCON"
        assert parser.parse(text).address == "DUARTE, RINCON"

    def test_mrz_and_labels_skipped(self, parser: BackSideParser) -> None:
        text = f"DIRECCION DE RESIDENCIA\n{MRZ_NAMES}\nCOLEGIO 0456\nLA VEGA"
        assert parser.parse(text).address == "LA VEGA"

    def test_lookahead_window(self, parser: BackSideParser) -> None:
        text = "DIRECCION\n12\n34\n56\n78\n90\nDUARTE"
        assert parser.parse(text).address is None

    def test_custom_part_limit(self) -> None:
        parser = BackSideParser(ExtractionConfig(max_address_parts=2))
        text = "DIRECCION\nDUARTE\nRINCON\nJIMA ABAJO"
        assert parser.parse(text).address == "DUARTE, RINCON"


class TestUnanchoredAddress:
    """Tests for the classification fallback."""

    def test_province_sector_municipality_order(self, parser: BackSideParser) -> None:
        text = (
            "COLEGIO 0456\n"
            "LOS ALCARRIZOS ABAJO\n"
            "RINCON LARGO\n"
            "SAN CRISTOBAL\n"
            "IDDOM0011234567<<<<<<<<<<<<<<<"
        )
        result = parser.parse(text)
        assert result.address == "SAN CRISTOBAL, RINCON LARGO, LOS ALCARRIZOS ABAJO"

    def test_accented_province(self, parser: BackSideParser) -> None:
        assert parser.classify(["LAS TERRENAS CENTRO", "SAMANÁ"])[0] == "SAMANÁ"

    def test_single_word_as_province(self, parser: BackSideParser) -> None:
        assert parser.classify(["VILLA MELLA NORTE", "GUERRA"]) == [
            "GUERRA",
            "VILLA MELLA NORTE",
        ]

    def test_roles_before_reading_order(self, parser: BackSideParser) -> None:
        parts = parser.classify(["LA VEGA", "CALLE 5 NORTE", "EL CERRO ALTO", "OTRO"])
        assert parts == ["LA VEGA", "OTRO", "CALLE 5 NORTE"]

    def test_remaining_candidates_fill_parts(self, parser: BackSideParser) -> None:
        parts = parser.classify(["LA VEGA", "PUEBLO", "CENTRO"])
        assert parts == ["LA VEGA", "PUEBLO", "CENTRO"]

    def test_no_address(self, parser: BackSideParser) -> None:
        text = "COLEGIO 0123\nIDDOM0011234567<<<<<<<<<<<<<<<\n12 34"
        result = parser.parse(text)
        assert result.address is None
        assert result.error is None

    def test_empty_text(self, parser: BackSideParser) -> None:
        result = parser.parse("")
        assert result.address is None
        assert result.error is None
