"""Shared test fixtures for the cédula OCR test suite."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

FRONT_TEXT = """JUNTA CENTRAL ELECTORAL
REPUBLICA DOMINICANA
CEDULA DE IDENTIDAD Y ELECTORAL
001-1234567-8
FECHA DE NACIMIENTO
15 A60STO 1998
LUGAR DE NACIMIENTO
SANTIAGO R.D.
SEXO M SANGRE O+
ESTADO CIVIL SOLTERO
OCUPACION COMERCIANTE
REPUBLICA DOMINICANA
MARINO
FULGENCIO QUEZADA
"""

BACK_TEXT = """UBICACION DEL COLEGIO
COLEGIO 0123
DIRECCION DE RESIDENCIA
DUARTE
SECTOR RINCON
MUNICIPIO JIMA ABAJO
IDDOM0011234567<<<<<<<<<<<<<<<
"""


def encode_png(array: np.ndarray) -> bytes:
    """Encode a numpy image array as PNG bytes."""
    buf = io.BytesIO()
    Image.fromarray(array).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def front_text() -> str:
    return FRONT_TEXT


@pytest.fixture
def back_text() -> str:
    return BACK_TEXT


@pytest.fixture
def card_array() -> np.ndarray:
    """Synthetic RGBA card: light blue background with dark ink strokes."""
    image = np.zeros((200, 300, 4), dtype=np.uint8)
    image[..., 0] = 180
    image[..., 1] = 210
    image[..., 2] = 240
    image[..., 3] = 255
    image[40:50, 20:200, :3] = (20, 20, 30)
    image[120:130, 20:150, :3] = (40, 35, 30)
    return image


@pytest.fixture
def card_png(card_array: np.ndarray) -> bytes:
    return encode_png(card_array)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
