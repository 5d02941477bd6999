"""Read-only lookup tables for the cédula layout.

Every table here is immutable so that concurrent extractions can share
them safely.
"""

import re
from types import MappingProxyType

from .text import fold_accents

MONTHS = MappingProxyType(
    {
        "ENERO": "01",
        "FEBRERO": "02",
        "MARZO": "03",
        "ABRIL": "04",
        "MAYO": "05",
        "JUNIO": "06",
        "JULIO": "07",
        "AGOSTO": "08",
        "SEPTIEMBRE": "09",
        "SETIEMBRE": "09",
        "OCTUBRE": "10",
        "NOVIEMBRE": "11",
        "DICIEMBRE": "12",
    }
)

# Digits Tesseract commonly reads in place of letters on the card font.
CONFUSABLES = MappingProxyType({"6": "G", "0": "O", "1": "I", "4": "A"})
_CONFUSABLE_TABLE = str.maketrans(dict(CONFUSABLES))

MONTH_ALTERNATION = "|".join(MONTHS)


def resolve_month(token: str) -> str | None:
    """Map a Spanish month name to its two-digit number.

    On a miss the confusable digits are replaced by letters and the
    lookup is retried once, so ``"A60STO"`` resolves like ``"AGOSTO"``.

    Args:
        token: Month token as read by OCR.

    Returns:
        ``"01"`` to ``"12"``, or ``None`` if the token is not a month.
    """
    key = fold_accents(token.upper())
    if key in MONTHS:
        return MONTHS[key]
    return MONTHS.get(key.translate(_CONFUSABLE_TABLE))


# Lines on the front that are never part of the holder's name.
NAME_EXCLUSIONS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"REP[UÚ]BLICA|DOMINICANA|JUNTA|CENTRAL|ELECTORAL|C[EÉ]DULA|IDENTIDAD",
        r"LUGAR\s+DE\s+NACIMIENTO",
        r"FECHA\s+DE\s+NACIMIENTO",
        r"NACIONALIDAD",
        r"SEXO|SANGRE|ESTADO\s+CIVIL|OCUPACI[OÓ]N",
        r"FECHA\s+DE\s+EXPIRACI[OÓ]N|EXPIRACI[OÓ]N",
        r"^\d{3}[- ]?\d{7}[- ]?\d$",
        r"EL\s+VALLE|R\.D\.|SANTO\s+DOMINGO|SANTIAGO",
        r"COMERCIANTE|ESTUDIANTE|PROFESOR|M[EÉ]DICO|INGENIERO|ABOGADO|ENFERMER[OA]",
        r"SOLTER[OA]|CASAD[OA]|DIVORCIAD[OA]|VIUD[OA]|UNI[OÓ]N\s+LIBRE",
        r"(?<![A-Z])(?:AB|A|B|O)\s?[+-](?![A-Z])",
        r"^[MF]$",
        rf"\b(?:{MONTH_ALTERNATION})\b",
        rf"^\d{{1,2}}\s+(?:{MONTH_ALTERNATION})\s+\d{{4}}$",
    )
)

# Anchors for the address block on the back, most specific first.
ADDRESS_ANCHORS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"DIRECC[I1][OÓ0]N\s+DE\s+RES[I1]DENC[I1]A",
        r"DIRECC[I1][OÓ0]N\s+RES[I1]DENC[I1]A",
        r"DIRECC[I1][OÓ0]N",
        r"RES[I1]DENC[I1]A",
    )
)

# Other field labels printed near the address on the back.
ADDRESS_LABEL = re.compile(
    r"^(?:C[EÉ]DULA|COLEGIO|UBICACI[OÓ]N|REGISTRO|C[OÓ]DIGO|PRESIDENTE|JCE"
    r"|IDDOM|CENTRO\s+EDUCATIVO)"
)

ADDRESS_PREFIX = re.compile(r"^(?:(?:SECTOR|MUNICIPIO|PROVINCIA|DM)\s+|R\.D\.\s*)+")

SECTOR_HINT = re.compile(r"RINC[OÓ]N|SECTOR")

PROVINCES = frozenset(
    {
        "AZUA",
        "BAHORUCO",
        "BARAHONA",
        "DAJABON",
        "DISTRITO NACIONAL",
        "DUARTE",
        "EL SEIBO",
        "ELIAS PINA",
        "ESPAILLAT",
        "HATO MAYOR",
        "HERMANAS MIRABAL",
        "INDEPENDENCIA",
        "LA ALTAGRACIA",
        "LA ROMANA",
        "LA VEGA",
        "MARIA TRINIDAD SANCHEZ",
        "MONSENOR NOUEL",
        "MONTE CRISTI",
        "MONTE PLATA",
        "PEDERNALES",
        "PERAVIA",
        "PUERTO PLATA",
        "SAMANA",
        "SAN CRISTOBAL",
        "SAN JOSE DE OCOA",
        "SAN JUAN",
        "SAN PEDRO",
        "SAN PEDRO DE MACORIS",
        "SANCHEZ RAMIREZ",
        "SANTIAGO",
        "SANTIAGO RODRIGUEZ",
        "SANTO DOMINGO",
        "VALVERDE",
    }
)
