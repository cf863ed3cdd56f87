from typing import List

from zebra_printer.errors import PackingError
from zebra_printer.models import BilevelBitmap, PackedPayload

# Convenção única de polaridade: pixel escuro vira bit 1 no ^GFA
DARK_PIXEL_BIT = 1
LIGHT_PIXEL_BIT = 1 - DARK_PIXEL_BIT


def bytes_per_row(width: int) -> int:
    return (width + 7) // 8


def _validate(bitmap: BilevelBitmap) -> None:
    if bitmap.width <= 0 or bitmap.height <= 0:
        raise PackingError(f"Bitmap vazio: {bitmap.width}x{bitmap.height}")
    if len(bitmap.rows) != bitmap.height:
        raise PackingError(
            f"Bitmap declara {bitmap.height} linhas mas tem {len(bitmap.rows)}"
        )
    for y, row in enumerate(bitmap.rows):
        if len(row) != bitmap.width:
            raise PackingError(
                f"Linha {y} tem {len(row)} pixels, esperado {bitmap.width}"
            )


def _pack_row(row, width: int, row_len: int) -> bytearray:
    row_bytes = bytearray(row_len)
    for x in range(width):
        pixel = row[x]
        if pixel not in (0, 1):
            raise PackingError(f"Pixel inválido {pixel!r} na coluna {x}")
        bit = DARK_PIXEL_BIT if pixel else LIGHT_PIXEL_BIT
        if bit:
            row_bytes[x // 8] |= 1 << (7 - (x % 8))
    return row_bytes


def pack(bitmap: BilevelBitmap) -> PackedPayload:
    """
    Converte o bitmap 1-bit em payload hex do ^GFA.
    Linhas de cima para baixo, 8 pixels por byte (MSB primeiro), bits
    excedentes do último byte de cada linha ficam zerados.
    """
    _validate(bitmap)

    row_len = bytes_per_row(bitmap.width)
    hex_lines = [
        _pack_row(row, bitmap.width, row_len).hex().upper()
        for row in bitmap.top_down_rows()
    ]

    return PackedPayload(
        width=bitmap.width,
        height=bitmap.height,
        bytes_per_row=row_len,
        total_bytes=row_len * bitmap.height,
        hex_payload="".join(hex_lines),
    )


def unpack(payload: PackedPayload) -> List[List[int]]:
    """Reverte pack(): devolve linhas de cima para baixo com 1 = escuro."""
    data = bytes.fromhex(payload.hex_payload)
    rows = []
    for y in range(payload.height):
        chunk = data[y * payload.bytes_per_row:(y + 1) * payload.bytes_per_row]
        row = []
        for x in range(payload.width):
            bit = (chunk[x // 8] >> (7 - (x % 8))) & 1
            row.append(1 if bit == DARK_PIXEL_BIT else 0)
        rows.append(row)
    return rows
