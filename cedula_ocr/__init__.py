"""Dominican national ID card (cédula) OCR extraction.

Reads the front and back of a cédula with Tesseract OCR after
luminance-threshold preprocessing, and parses the noisy text into
name, cédula number, date of birth and residential address fields.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
