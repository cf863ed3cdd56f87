import io
import struct

import pytest
from PIL import Image

from zebra_printer.errors import ConversionError
from zebra_printer.models import BilevelBitmap, PrinterSettings
from zebra_printer.services.packing_service import pack
from zebra_printer.services.raster_service import (
    MagickRasterProvider, PillowRasterProvider, get_raster_provider, read_bmp_bitmap,
)


def _bmp(width, height, rows, palette=((0, 0, 0), (255, 255, 255)), top_down=False, bpp=1):
    """Monta um BMP 1-bpp à mão; `rows` na ordem em que ficam no arquivo."""
    row_size = ((width + 31) // 32) * 4
    pixels = b""
    for row in rows:
        packed = bytearray(row_size)
        for x, idx in enumerate(row):
            if idx:
                packed[x // 8] |= 1 << (7 - x % 8)
        pixels += bytes(packed)
    pal = b"".join(bytes((b, g, r, 0)) for (r, g, b) in palette)
    offset = 14 + 40 + len(pal)
    file_header = b"BM" + struct.pack("<IHHI", offset + len(pixels), 0, 0, offset)
    dib = struct.pack("<IiiHHIIiiII", 40, width, -height if top_down else height,
                      1, bpp, 0, len(pixels), 2835, 2835, 2, 0)
    return file_header + dib + pal + pixels


def test_pillow_provider_black_is_dark(tmp_path) -> None:
    img = Image.new("L", (16, 4), 255)
    for x in range(8):
        for y in range(4):
            img.putpixel((x, y), 0)
    path = tmp_path / "half.png"
    img.save(path)

    for dither in (True, False):
        bitmap = PillowRasterProvider().render(path, 16, 4, dither=dither)
        assert (bitmap.width, bitmap.height, bitmap.bottom_up) == (16, 4, False)
        assert all(row == [1] * 8 + [0] * 8 for row in bitmap.rows)


def test_pillow_provider_resizes_exactly(make_png) -> None:
    bitmap = PillowRasterProvider().render(make_png(400, 300, color=0), 674, 505)
    assert (bitmap.width, bitmap.height) == (674, 505)
    assert len(bitmap.rows) == 505
    assert all(len(row) == 674 for row in bitmap.rows)


def test_pillow_provider_transparent_background_is_light(make_png) -> None:
    path = make_png(10, 10, color=(0, 0, 0, 0), mode="RGBA")
    bitmap = PillowRasterProvider().render(path, 10, 10)
    assert all(v == 0 for row in bitmap.rows for v in row)


def test_pillow_provider_rejects_garbage(tmp_path) -> None:
    path = tmp_path / "bad.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ConversionError):
        PillowRasterProvider().render(path, 10, 10)


def test_read_bmp_written_by_pillow_is_bottom_up() -> None:
    img = Image.new("1", (10, 3), 1)
    img.putpixel((0, 0), 0)
    img.putpixel((9, 2), 0)
    buf = io.BytesIO()
    img.save(buf, format="BMP")

    bitmap = read_bmp_bitmap(buf.getvalue(), 10, 3)
    assert bitmap.bottom_up is True
    expected_top_down = [
        [1] + [0] * 9,
        [0] * 10,
        [0] * 9 + [1],
    ]
    assert bitmap.top_down_rows() == expected_top_down
    assert pack(bitmap).hex_payload == pack(BilevelBitmap(10, 3, expected_top_down)).hex_payload


def test_read_bmp_top_down_with_inverted_palette() -> None:
    # índice 0 = branco, índice 1 = preto
    data = _bmp(8, 2, [[1, 1, 0, 0, 0, 0, 0, 0], [0] * 8],
                palette=((255, 255, 255), (0, 0, 0)), top_down=True)
    bitmap = read_bmp_bitmap(data, 8, 2)
    assert bitmap.bottom_up is False
    assert bitmap.rows == [[1, 1, 0, 0, 0, 0, 0, 0], [0] * 8]


def test_read_bmp_dimension_mismatch() -> None:
    data = _bmp(8, 2, [[0] * 8, [0] * 8])
    with pytest.raises(ConversionError):
        read_bmp_bitmap(data, 16, 2)


def test_read_bmp_rejects_non_monochrome() -> None:
    data = _bmp(8, 1, [[0] * 8], bpp=8)
    with pytest.raises(ConversionError):
        read_bmp_bitmap(data, 8, 1)


def test_read_bmp_rejects_truncated_and_garbage() -> None:
    data = _bmp(8, 4, [[0] * 8] * 4)
    with pytest.raises(ConversionError):
        read_bmp_bitmap(data[:-4], 8, 4)
    with pytest.raises(ConversionError):
        read_bmp_bitmap(b"GIF89a" + b"\0" * 60, 8, 4)


def test_magick_command_line(tmp_path) -> None:
    cmd = MagickRasterProvider("convert").command(tmp_path / "in.png", 674, 505, tmp_path / "out.bmp")
    assert cmd[0] == "convert"
    assert "674x505!" in cmd
    assert ["-dither", "FloydSteinberg"] == cmd[cmd.index("-dither"):cmd.index("-dither") + 2]
    assert cmd[-1] == f"BMP3:{tmp_path / 'out.bmp'}"


def test_magick_missing_binary_is_conversion_error(make_png) -> None:
    provider = MagickRasterProvider("/nonexistent/magick-convert")
    with pytest.raises(ConversionError):
        provider.render(make_png(10, 10), 10, 10)


def test_provider_selection() -> None:
    assert isinstance(get_raster_provider(PrinterSettings()), PillowRasterProvider)
    assert isinstance(get_raster_provider(PrinterSettings(raster_engine="magick")), MagickRasterProvider)
    provider = get_raster_provider(PrinterSettings(raster_engine="magick", magick_binary="/opt/im/convert"))
    assert provider.binary == "/opt/im/convert"


def test_pillow_provider_rejects_decompression_bomb(make_png, monkeypatch) -> None:
    path = make_png(100, 100)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(ConversionError):
        PillowRasterProvider().render(path, 10, 10)
