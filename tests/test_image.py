import base64
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from qrsymbol import InvalidErrorCorrectionLevel, InvalidVersionFloor
from qrsymbol.errors import EncodingError
from qrsymbol.image import QRCodeImage, QRSpec, box_size_for_width, make_qr, save_qr_png

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_spec_normalizes_ecc():
    spec = QRSpec(data="x", ecc="q")
    assert spec.ecc == "Q"
    assert spec.ecc_level.name == "Q"


@pytest.mark.parametrize("kwargs, exc", [
    ({"data": 123}, TypeError),
    ({"data": "x", "box_size": 0}, ValueError),
    ({"data": "x", "border": -1}, ValueError),
    ({"data": "x", "ecc": "Z"}, InvalidErrorCorrectionLevel),
    ({"data": "x", "min_version": 0}, InvalidVersionFloor),
    ({"data": "x", "mode": "morse"}, EncodingError),
])
def test_spec_validation(kwargs, exc):
    with pytest.raises(exc):
        QRSpec(**kwargs)


def test_spec_is_frozen():
    spec = QRSpec(data="x")
    with pytest.raises(AttributeError):
        spec.data = "y"


def test_shapes():
    qr = QRCodeImage(QRSpec(data="HELLO", ecc="Q"))
    assert qr.symbol.version == 1
    assert qr.module_shape == (21, 21)
    assert qr.pixel_shape == (290, 290)


def test_render_array_colours():
    qr = make_qr("HELLO", box_size=2, border=1, ecc="Q")
    img = qr.render_array(fg=(10, 20, 30), bg=(200, 210, 220))
    assert img.shape == (46, 46, 3)
    assert img.dtype == np.uint8
    # quiet zone, then the top-left finder corner
    assert img[0, 0].tolist() == [200, 210, 220]
    assert img[2, 2].tolist() == [10, 20, 30]
    assert img[3, 3].tolist() == [10, 20, 30]


def test_render_matches_modules():
    qr = make_qr("pixels", box_size=3, border=0)
    img = qr.render_array()
    dark = img[1::3, 1::3, 0] == 0
    assert np.array_equal(dark, qr.matrix)


def test_png_bytes_and_data_uri():
    qr = make_qr("https://example.com", box_size=4, border=2)
    png = qr.to_png_bytes()
    assert png.startswith(PNG_SIGNATURE)
    with Image.open(BytesIO(png)) as im:
        assert im.size == qr.pixel_shape[::-1]
        assert im.mode == "RGB"

    uri = qr.to_data_uri()
    prefix = "data:image/png;base64,"
    assert uri.startswith(prefix)
    assert base64.b64decode(uri[len(prefix):]) == png


def test_save_png(tmp_path):
    path = tmp_path / "code.png"
    qr = save_qr_png(path, "saved", box_size=5, border=1, ecc="H")
    assert path.read_bytes().startswith(PNG_SIGNATURE)
    with Image.open(path) as im:
        assert im.size == (qr.pixel_shape[1], qr.pixel_shape[0])


def test_make_qr_passes_options():
    qr = make_qr("12345", ecc="h", min_version=3, mode="byte")
    assert qr.spec.ecc == "H"
    assert qr.symbol.version == 3
    assert qr.symbol.segments[0].mode.name == "BYTE"


def test_box_size_for_width():
    assert box_size_for_width(25, 2, 256) == 8
    assert box_size_for_width(177, 4, 100) == 1


def test_validate_with_opencv():
    pytest.importorskip("cv2")
    qr = make_qr("https://example.com", box_size=8, border=4)
    assert qr.validate()
    blank = np.full((200, 200, 3), 255, dtype=np.uint8)
    assert not qr.validate(blank)


def test_decode_rejects_bad_shape():
    pytest.importorskip("cv2")
    qr = make_qr("x")
    with pytest.raises(ValueError):
        qr.validate(np.zeros((10, 10), dtype=np.uint8))


def test_save_qr_png_forwards_encoder_options(tmp_path):
    path = tmp_path / "options.png"
    qr = save_qr_png(
        path, "12345", box_size=1, border=0, ecc="L",
        min_version=5, mode="byte", encoding="ascii",
    )
    assert qr.symbol.version == 5
    assert qr.symbol.segments[0].mode.name == "BYTE"
    with Image.open(path) as im:
        assert im.size == (37, 37)
