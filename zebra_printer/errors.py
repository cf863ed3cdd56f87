# zebra_printer/errors.py
from dataclasses import dataclass
from typing import Callable, Optional


class ZebraPrinterError(Exception):
    """Base de todos os erros do pipeline imagem -> ZPL -> impressora."""
    kind = "ZebraPrinterError"


class ImageNotFoundError(ZebraPrinterError):
    kind = "ImageNotFoundError"


class ImageDecodeError(ZebraPrinterError):
    kind = "ImageDecodeError"


class ConversionError(ZebraPrinterError):
    kind = "ConversionError"


class InvalidGeometryError(ZebraPrinterError):
    kind = "InvalidGeometryError"


class PackingError(ZebraPrinterError):
    kind = "PackingError"


class PrinterConnectionError(ZebraPrinterError):
    kind = "ConnectionError"


class TransmissionError(ZebraPrinterError):
    kind = "TransmissionError"


@dataclass(frozen=True)
class OperationResult:
    success: bool
    kind: Optional[str] = None
    message: str = ""
    zpl: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"success": self.success}
        if not self.success:
            data["error"] = self.kind
            data["message"] = self.message
        if self.zpl is not None:
            data["zpl"] = self.zpl
            data["size"] = self.size
        return data


def capture(operation: Callable, *args, **kwargs) -> OperationResult:
    """
    Executa a operação e converte erros conhecidos em OperationResult.
    Erros inesperados continuam subindo.
    """
    try:
        value = operation(*args, **kwargs)
    except ZebraPrinterError as e:
        return OperationResult(False, kind=e.kind, message=str(e))

    # convert_only devolve LabelDocument; print/send devolvem bytes escritos
    to_zpl = getattr(value, "to_zpl", None)
    if to_zpl is not None:
        return OperationResult(True, zpl=to_zpl(), size=value.size)
    return OperationResult(True)
