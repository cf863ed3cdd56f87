from zebra_printer.errors import PackingError
from zebra_printer.models import (
    LabelDocument, PackedPayload, PrinterSettings, TargetGeometry, ThermalMode,
)

PRINT_MODE_COMMANDS = {
    ThermalMode.DIRECT_THERMAL:   "^MTD",
    ThermalMode.THERMAL_TRANSFER: "^MTT",
}


def build_document(settings: PrinterSettings, geometry: TargetGeometry,
                   payload: PackedPayload) -> LabelDocument:
    """
    Monta a etiqueta ZPL completa para uma imagem:
    modo, escurecimento, largura/comprimento, origem e o ^GFA.
    """
    if (payload.width, payload.height) != (geometry.target_width, geometry.target_height):
        raise PackingError(
            f"Payload {payload.width}x{payload.height} não bate com a geometria "
            f"{geometry.target_width}x{geometry.target_height}"
        )

    m = geometry.margin_dots
    lines = [
        "^XA",
        PRINT_MODE_COMMANDS[settings.thermal_mode],
        f"^MD{settings.darkness}",
        f"^PW{settings.page_width_dots}",
        f"^LL{geometry.label_length_dots}",
        f"^FO{m},{m}",
        # ^GFA sem compressão: total de bytes repetido nos dois campos
        f"^GFA,{payload.total_bytes},{payload.total_bytes},{payload.bytes_per_row},{payload.hex_payload}",
        "^FS",
        "^XZ",
    ]
    return LabelDocument(tuple(lines))
