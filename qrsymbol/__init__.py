"""
QR Code (ISO/IEC 18004, Model 2) symbol encoder with PNG rendering.

>>> from qrsymbol import encode
>>> symbol = encode("HELLO", "Q")
>>> symbol.version, symbol.ec_level.name, symbol.size
(1, 'Q', 21)
"""

from .constants import ErrorCorrectionLevel, Mode
from .encoder import EncodedSymbol, encode
from .errors import (
    DataTooLong,
    EncodingError,
    InvalidErrorCorrectionLevel,
    InvalidVersionFloor,
    UnsupportedCharacter,
)
from .image import QRCodeImage, QRSpec, make_qr, save_qr_png
from .matrix import ModuleMatrix
from .segments import Segment

__version__ = "0.1.0"

__all__ = [
    "DataTooLong",
    "EncodedSymbol",
    "EncodingError",
    "ErrorCorrectionLevel",
    "InvalidErrorCorrectionLevel",
    "InvalidVersionFloor",
    "Mode",
    "ModuleMatrix",
    "QRCodeImage",
    "QRSpec",
    "Segment",
    "UnsupportedCharacter",
    "encode",
    "make_qr",
    "save_qr_png",
]
