# zebra_printer/services/raster_service.py
"""
Rasterização: reduz a imagem de origem para um bitmap 1-bit no tamanho
exato da etiqueta.

Dois motores:
  - pillow → em processo, Floyd-Steinberg do próprio Pillow (padrão)
  - magick → chama o `convert` do ImageMagick e lê o BMP 1-bit gerado
"""
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from PIL import Image

from zebra_printer.constants import DEFAULT_MAGICK_BINARY
from zebra_printer.errors import ConversionError
from zebra_printer.models import BilevelBitmap, PrinterSettings
from zebra_printer.services.log_service import log_service

THRESHOLD = 128


class RasterProvider(Protocol):
    def render(self, source_path: Path, width: int, height: int,
               dither: bool = True) -> BilevelBitmap:
        ...


def _flatten_alpha(img: Image.Image) -> Image.Image:
    # Transparente vira branco (senão "L" deixa o fundo preto)
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba)
    return img


class PillowRasterProvider:
    def render(self, source_path: Path, width: int, height: int,
               dither: bool = True) -> BilevelBitmap:
        try:
            with Image.open(source_path) as img:
                gray = _flatten_alpha(img).convert("L")
                gray = gray.resize((width, height), Image.Resampling.LANCZOS)
            if dither:
                bw = gray.convert("1", dither=Image.Dither.FLOYDSTEINBERG)
            else:
                bw = gray.point(lambda p: 0 if p < THRESHOLD else 255, "1")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise ConversionError(f"Falha ao rasterizar {source_path}: {e}") from e

        if bw.size != (width, height):
            raise ConversionError(
                f"Raster com {bw.size[0]}x{bw.size[1]}, esperado {width}x{height}"
            )

        # "1" -> "L": 0 = preto, 255 = branco
        data = bw.convert("L").tobytes()
        rows = [
            [1 if v == 0 else 0 for v in data[y * width:(y + 1) * width]]
            for y in range(height)
        ]
        return BilevelBitmap(width, height, rows, bottom_up=False)


class MagickRasterProvider:
    def __init__(self, binary: str = DEFAULT_MAGICK_BINARY):
        self.binary = binary

    def command(self, source_path: Path, width: int, height: int,
                output: Path, dither: bool = True) -> list:
        cmd = [self.binary, str(source_path),
               "-resize", f"{width}x{height}!",
               "-colorspace", "Gray"]
        cmd += ["-dither", "FloydSteinberg"] if dither else ["+dither"]
        cmd += ["-colors", "2", "-monochrome", "-type", "bilevel", f"BMP3:{output}"]
        return cmd

    def render(self, source_path: Path, width: int, height: int,
               dither: bool = True) -> BilevelBitmap:
        with tempfile.TemporaryDirectory(prefix="zpl_") as tmp:
            output = Path(tmp) / "raster.bmp"
            cmd = self.command(source_path, width, height, output, dither)
            try:
                proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
            except OSError as e:
                raise ConversionError(
                    "Image conversion failed. Install ImageMagick: sudo apt-get install imagemagick"
                ) from e

            if proc.returncode != 0 or not output.exists():
                log_service("magick_falhou", returncode=proc.returncode,
                            stderr=(proc.stderr or "")[-500:])
                raise ConversionError(
                    f"ImageMagick terminou com código {proc.returncode}: {(proc.stderr or '').strip()}"
                )
            return read_bmp_bitmap(output.read_bytes(), width, height)


def _u32(data: bytes, offset: int, signed: bool = False) -> int:
    return int.from_bytes(data[offset:offset + 4], "little", signed=signed)


def _luminance(entry: bytes) -> float:
    b, g, r = entry[0], entry[1], entry[2]
    return 0.299 * r + 0.587 * g + 0.114 * b


def read_bmp_bitmap(data: bytes, width: int, height: int) -> BilevelBitmap:
    """
    Lê um BMP 1-bpp (BITMAPINFOHEADER ou maior).
    - offset dos pixels vem do cabeçalho (a paleta fica antes dele)
    - a paleta decide qual índice é o escuro
    - altura positiva = linhas de baixo para cima; negativa = de cima para baixo
    As linhas são devolvidas na ordem do arquivo, com `bottom_up` marcado.
    """
    if len(data) < 54 or data[:2] != b"BM":
        raise ConversionError("Arquivo BMP inválido")

    pixel_offset = _u32(data, 10)
    dib_size = _u32(data, 14)
    bmp_width = _u32(data, 18, signed=True)
    bmp_height = _u32(data, 22, signed=True)
    bpp = int.from_bytes(data[28:30], "little")

    if bpp != 1:
        raise ConversionError(f"BMP com {bpp} bits por pixel, esperado 1")
    if (bmp_width, abs(bmp_height)) != (width, height):
        raise ConversionError(
            f"BMP com {bmp_width}x{abs(bmp_height)}, esperado {width}x{height}"
        )

    palette_at = 14 + dib_size
    if pixel_offset >= palette_at + 8:
        lum0 = _luminance(data[palette_at:palette_at + 4])
        lum1 = _luminance(data[palette_at + 4:palette_at + 8])
        dark_index = 0 if lum0 <= lum1 else 1
    else:
        dark_index = 0

    row_size = ((width + 31) // 32) * 4
    if len(data) < pixel_offset + row_size * height:
        raise ConversionError("BMP truncado")

    rows = []
    for i in range(height):
        start = pixel_offset + i * row_size
        raw = data[start:start + row_size]
        rows.append([
            1 if ((raw[x // 8] >> (7 - (x % 8))) & 1) == dark_index else 0
            for x in range(width)
        ])

    return BilevelBitmap(width, height, rows, bottom_up=bmp_height > 0)


def get_raster_provider(settings: PrinterSettings) -> RasterProvider:
    if settings.raster_engine == "magick":
        return MagickRasterProvider(settings.magick_binary)
    return PillowRasterProvider()
