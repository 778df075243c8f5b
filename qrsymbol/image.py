"""
QR code rasterization utilities.

This module turns an encoded symbol into pixels. The symbol structure is
generated once by :func:`qrsymbol.encode` and stored as a 2D boolean
array, while rendering is performed explicitly in pixel space: every
module becomes a square of ``box_size`` pixels and a quiet zone of
``border`` modules surrounds the symbol.

Functions
---------
make_qr
    Create a QRCodeImage from payload and configuration.
save_qr_png
    Generate and save a QR PNG.
box_size_for_width
    Largest module size whose image fits a pixel width.

Classes
-------
QRSpec
    Immutable QR code configuration.
QRCodeImage
    QR code backed by a boolean module matrix with explicit rendering
    and validation utilities.

Features
--------
* Explicit rendering into:
    - NumPy arrays (RGB)
    - PIL images
    - PNG bytes
    - ``data:image/png;base64`` URIs
* Foreground/background colour selection.
* OpenCV-based decoding and validation (optional dependency).

Examples
--------
>>> spec = QRSpec(data="https://example.com", box_size=10, border=4, ecc="Q")
>>> qr = QRCodeImage(spec)
>>> qr.module_shape
(25, 25)
>>> qr.save_png("qrcode.png")
>>> uri = qr.to_data_uri()

Notes
-----
OpenCV is optional and required only for decoding. If unavailable,
decoding raises RuntimeError.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from .constants import ErrorCorrectionLevel, Mode, check_version
from .encoder import EncodedSymbol, encode
from .segments import parse_mode


Color = tuple[int, int, int]  # (R, G, B)


@dataclass(frozen=True)
class QRSpec:
    """
    Immutable configuration specification for generating a QR code.

    Parameters
    ----------
    data : str
        Payload encoded into the QR code. May be empty.
    box_size : int, optional
        Size, in pixels, of each QR code module. The default is 10.
    border : int, optional
        Width, in modules, of the quiet zone around the code. The
        default is 4, which is the minimum recommended by the QR
        standard.
    ecc : {'L', 'M', 'Q', 'H'}, optional
        Error-correction level. The value is case-insensitive and is
        normalized to uppercase. The default is 'M'.
    min_version : int, optional
        Smallest symbol version to use. The default is 1.
    mode : {'numeric', 'alphanumeric', 'byte', 'kanji'}, optional
        Force a single encoding mode. The default (None) chooses modes
        automatically.
    encoding : str, optional
        Codec for byte-mode data. The default is 'utf-8'.

    Notes
    -----
    This class is frozen (immutable). The `ecc` value is validated and
    normalized to uppercase during ``__post_init__``.

    Raises
    ------
    TypeError
        If `data` is not a string.
    ValueError
        If `box_size` is smaller than 1 or `border` is negative.
    InvalidErrorCorrectionLevel
        If `ecc` is not one of {'L', 'M', 'Q', 'H'} (a ValueError).
    InvalidVersionFloor
        If `min_version` is outside 1..40 (a ValueError).
    """

    data: str
    box_size: int = 10
    border: int = 4
    ecc: str = "M"
    min_version: int = 1
    mode: Optional[str] = None
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if not isinstance(self.data, str):
            raise TypeError("'data' must be a string")
        if self.box_size < 1:
            raise ValueError("'box_size' must be at least 1")
        if self.border < 0:
            raise ValueError("'border' must not be negative")
        check_version(self.min_version)
        parse_mode(self.mode)

        # Store normalized ECC
        object.__setattr__(self, "ecc", ErrorCorrectionLevel.parse(self.ecc).name)

    @property
    def ecc_level(self) -> ErrorCorrectionLevel:
        """Error-correction level member corresponding to `ecc`."""
        return ErrorCorrectionLevel[self.ecc]


class QRCodeImage:
    """
    Generated QR code backed by a boolean module matrix.

    Parameters
    ----------
    spec : QRSpec
        QR code configuration, including payload (`data`), module box
        size, border width and error-correction level.

    Attributes
    ----------
    spec : QRSpec
        QR specification used to generate this image.
    symbol : EncodedSymbol
        Encoder output: version, level, mask and module matrix.
    matrix : numpy.ndarray
        Boolean 2D array representing the QR module grid with shape
        (rows, cols). True indicates a dark module.
    module_shape : tuple of int
        Shape of the QR module grid as (rows, cols).
    pixel_shape : tuple of int
        Shape of the rendered QR image in pixels as (height, width),
        including the quiet-zone border.
    """

    def __init__(self, spec: QRSpec) -> None:
        self.spec = spec
        self.symbol = self._build_symbol()

    # ---------- Core matrix generation ----------

    def _build_symbol(self) -> EncodedSymbol:
        return encode(
            self.spec.data,
            self.spec.ecc_level,
            self.spec.min_version,
            mode=self.spec.mode,
            encoding=self.spec.encoding,
        )

    @property
    def matrix(self) -> np.ndarray:
        """
        Boolean module matrix.

        Returns
        -------
        numpy.ndarray
            Read-only boolean array of shape (rows, cols). True indicates
            a dark module and False indicates a light module.
        """
        return self.symbol.modules

    @property
    def module_shape(self) -> tuple[int, int]:
        return self.matrix.shape

    @property
    def pixel_shape(self) -> tuple[int, int]:
        """
        Shape of the rendered QR image in pixels.

        Returns
        -------
        tuple of int
            Pair (height, width) of the rendered image in pixels,
            quiet zone included.
        """
        rows, cols = self.module_shape
        h = (rows + 2 * self.spec.border) * self.spec.box_size
        w = (cols + 2 * self.spec.border) * self.spec.box_size
        return h, w

    # ---------- Rendering ----------

    def _full_mask(self) -> np.ndarray:
        """
        Construct the full-resolution boolean mask in pixel space.

        Returns
        -------
        numpy.ndarray
            Boolean array of shape (H, W) where True indicates pixels
            of dark modules and False background pixels (including the
            quiet-zone region).
        """
        box = self.spec.box_size

        # Scale module grid with Kronecker product
        scaled = np.kron(self.matrix, np.ones((box, box), dtype=bool))
        # Pad border in pixels (border modules * box_size pixels)
        pad = self.spec.border * box
        return np.pad(scaled, pad_width=pad, mode="constant", constant_values=False)

    def render_array(
        self,
        *,
        fg: Color = (0, 0, 0),
        bg: Color = (255, 255, 255),
    ) -> np.ndarray:
        """
        Render the QR code to an RGB NumPy array.

        Parameters
        ----------
        fg : Color, optional
            Colour of dark modules as an (R, G, B) triple in the range
            0–255. The default is (0, 0, 0).
        bg : Color, optional
            Colour of light modules and of the quiet zone. The default
            is (255, 255, 255).

        Returns
        -------
        numpy.ndarray
            Array of shape (H, W, 3) with dtype uint8.
        """
        h, w = self.pixel_shape
        img = np.full((h, w, 3), bg, dtype=np.uint8)

        mask = self._full_mask()  # (H, W) bool
        img[mask] = fg
        return img

    def render_pil(
        self,
        *,
        fg: Color = (0, 0, 0),
        bg: Color = (255, 255, 255),
    ) -> Image.Image:
        """Render the QR code as an RGB PIL image."""
        return Image.fromarray(self.render_array(fg=fg, bg=bg))

    def to_png_bytes(
        self,
        *,
        fg: Color = (0, 0, 0),
        bg: Color = (255, 255, 255),
    ) -> bytes:
        """
        Return PNG-encoded bytes of the rendered QR code.

        Parameters
        ----------
        fg : Color, optional
            Colour of dark modules. The default is (0, 0, 0).
        bg : Color, optional
            Background colour. The default is (255, 255, 255).

        Returns
        -------
        bytes
            PNG-encoded image data.
        """
        img = self.render_pil(fg=fg, bg=bg)
        buf = BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def to_data_uri(
        self,
        *,
        fg: Color = (0, 0, 0),
        bg: Color = (255, 255, 255),
    ) -> str:
        """Return the PNG rendering as a ``data:image/png;base64,`` URI."""
        payload = base64.b64encode(self.to_png_bytes(fg=fg, bg=bg)).decode("ascii")
        return f"data:image/png;base64,{payload}"

    # ---------- Validation / decoding (with OpenCV) ----------

    def _decode_with_cv2(
        self,
        image: Optional[np.ndarray] = None,
    ) -> tuple[Optional[str], bool]:
        """
        Decode a QR image using OpenCV's QRCodeDetector.

        Parameters
        ----------
        image : numpy.ndarray, optional
            RGB image of shape (H, W, 3). If None, the plain rendering of
            this object is used. The default is None.

        Returns
        -------
        tuple of (str or None, bool)
            Decoded text (None if no QR code was detected) and whether
            OpenCV reported a successful decode.

        Raises
        ------
        RuntimeError
            If OpenCV (cv2) is not installed.
        ValueError
            If `image` is provided but does not have shape (H, W, 3).
        """
        try:
            import cv2
        except ImportError as exc:
            raise RuntimeError(
                "_decode_with_cv2 requires OpenCV (cv2) to be installed."
            ) from exc

        if image is None:
            rgb = self.render_array()
        else:
            rgb = np.asarray(image)
            if rgb.ndim != 3 or rgb.shape[2] != 3:
                raise ValueError("image must be (H, W, 3)")

        rgb = rgb.astype(np.uint8, copy=False)

        # Assume input is RGB and convert to BGR for OpenCV
        bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

        detector = cv2.QRCodeDetector()
        data, points, _ = detector.detectAndDecode(bgr)

        if points is None or not data:
            return None, False

        return data, True

    def validate(
        self,
        image: Optional[np.ndarray] = None,
    ) -> bool:
        """
        Validate that a QR image decodes to this object's payload.

        Parameters
        ----------
        image : numpy.ndarray, optional
            RGB image to validate. If None, the plain rendered QR code
            from this object is validated. The default is None.

        Returns
        -------
        bool
            True if the image decodes to ``self.spec.data``.
        """
        decoded, ok = self._decode_with_cv2(image=image)
        return bool(ok and decoded == self.spec.data)

    # ---------- Convenience saving ----------

    def save_png(
        self,
        path: Union[str, Path],
        *,
        fg: Color = (0, 0, 0),
        bg: Color = (255, 255, 255),
    ) -> None:
        """Save the rendered QR code as a PNG file at `path`."""
        self.render_pil(fg=fg, bg=bg).save(Path(path), format="PNG")


# ---------- Sizing ----------

def box_size_for_width(modules: int, border: int, width: int) -> int:
    """
    Largest module size whose rendering is at most `width` pixels wide.

    Parameters
    ----------
    modules : int
        Modules per side of the symbol.
    border : int
        Quiet-zone width in modules.
    width : int
        Target image width in pixels.

    Returns
    -------
    int
        Module size in pixels, never less than 1.
    """
    return max(1, width // (modules + 2 * border))


# ---------- Helper for creation ----------

def make_qr(
    data: str,
    *,
    box_size: int = 10,
    border: int = 4,
    ecc: str = "M",
    min_version: int = 1,
    mode: Optional[Union[Mode, str]] = None,
    encoding: str = "utf-8",
) -> QRCodeImage:
    """
    Create a QRCodeImage from payload and configuration.

    Parameters
    ----------
    data : str
        Payload encoded into the QR code.
    box_size : int, optional
        Size, in pixels, of each QR code module. The default is 10.
    border : int, optional
        Width, in modules, of the quiet zone. The default is 4.
    ecc : {'L', 'M', 'Q', 'H'}, optional
        Error-correction level. The default is 'M'.
    min_version : int, optional
        Smallest symbol version. The default is 1.
    mode : str, optional
        Forced encoding mode; see QRSpec.
    encoding : str, optional
        Codec for byte-mode data. The default is 'utf-8'.

    Returns
    -------
    QRCodeImage

    Raises
    ------
    ValueError
        If a parameter is invalid (as enforced by QRSpec) or the data
        cannot be encoded (EncodingError).
    """
    if isinstance(mode, Mode):
        mode = mode.name.lower()
    spec = QRSpec(
        data=data,
        box_size=box_size,
        border=border,
        ecc=ecc,
        min_version=min_version,
        mode=mode,
        encoding=encoding,
    )
    return QRCodeImage(spec)


# ---------- Helper for creation and saving ----------

def save_qr_png(
    path: Union[str, Path],
    data: str,
    *,
    box_size: int = 10,
    border: int = 4,
    ecc: str = "M",
    min_version: int = 1,
    mode: Optional[Union[Mode, str]] = None,
    encoding: str = "utf-8",
    fg: Color = (0, 0, 0),
    bg: Color = (255, 255, 255),
) -> QRCodeImage:
    """
    Generate a QR code for `data` and save it as a PNG at `path`.

    Encoding options are those of `make_qr`; `fg` and `bg` are the module
    and background colours.

    Returns
    -------
    QRCodeImage
        The image that was written, for further inspection.
    """
    qr = make_qr(
        data,
        box_size=box_size,
        border=border,
        ecc=ecc,
        min_version=min_version,
        mode=mode,
        encoding=encoding,
    )
    qr.save_png(path, fg=fg, bg=bg)
    return qr
