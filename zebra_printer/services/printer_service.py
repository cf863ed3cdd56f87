# zebra_printer/services/printer_service.py
"""
Impressão de imagens em Zebra via ZPL.

Fluxo: origem da imagem → geometria → rasterização 1-bit → ^GFA hex
→ documento ZPL → reset + envio pela porta raw.
"""
from typing import Optional

from zebra_printer.constants import DEFAULT_MARGIN_CM
from zebra_printer.errors import ConversionError, OperationResult, capture
from zebra_printer.models import LabelDocument, PrinterSettings
from zebra_printer.services.document_service import build_document
from zebra_printer.services.geometry_service import compute_geometry
from zebra_printer.services.log_service import log_service
from zebra_printer.services.packing_service import pack
from zebra_printer.services.printing_service import Payload, PrinterTransport
from zebra_printer.services.raster_service import RasterProvider, get_raster_provider
from zebra_printer.services.source_service import ImageSource, open_image_source, read_image_size


class ZebraPrinter:
    def __init__(self, settings: PrinterSettings,
                 raster_provider: Optional[RasterProvider] = None,
                 transport: Optional[PrinterTransport] = None):
        self.settings = settings
        self.raster_provider = raster_provider or get_raster_provider(settings)
        self.transport = transport or PrinterTransport(settings)

    def convert_only(self, image: ImageSource, margin_cm: float = 0) -> LabelDocument:
        """Converte a imagem em documento ZPL sem enviar nada."""
        with open_image_source(image) as path:
            width, height = read_image_size(path)
            geometry = compute_geometry(self.settings, margin_cm, width, height)
            bitmap = self.raster_provider.render(
                path, geometry.target_width, geometry.target_height, dither=True
            )

        if (bitmap.width, bitmap.height) != (geometry.target_width, geometry.target_height):
            raise ConversionError(
                f"Raster {bitmap.width}x{bitmap.height} difere do pedido "
                f"{geometry.target_width}x{geometry.target_height}"
            )

        payload = pack(bitmap)
        document = build_document(self.settings, geometry, payload)
        log_service("imagem_convertida",
                    origem=("<bytes>" if isinstance(image, (bytes, bytearray)) else str(image)),
                    largura=geometry.target_width, altura=geometry.target_height,
                    total_bytes=payload.total_bytes)
        return document

    def print(self, image: ImageSource, margin_cm: float = DEFAULT_MARGIN_CM) -> int:
        document = self.convert_only(image, margin_cm)
        return self.transport.send(document)

    def send(self, payload: Payload, host: Optional[str] = None, port: Optional[int] = None) -> int:
        return self.transport.send(payload, host, port)

    def is_online(self, host: Optional[str] = None, port: Optional[int] = None) -> bool:
        return self.transport.is_online(host, port)

    # -----------------------------------------------------
    # Versões que devolvem OperationResult (API / lotes)
    # -----------------------------------------------------
    def preview(self, image: ImageSource, margin_cm: float = DEFAULT_MARGIN_CM) -> OperationResult:
        return capture(self.convert_only, image, margin_cm)

    def print_result(self, image: ImageSource, margin_cm: float = DEFAULT_MARGIN_CM) -> OperationResult:
        return capture(self.print, image, margin_cm)
