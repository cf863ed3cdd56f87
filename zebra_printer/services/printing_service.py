import socket
import time
from typing import Callable, Optional, Union

from zebra_printer.constants import RESET_COMMAND
from zebra_printer.errors import PrinterConnectionError, TransmissionError
from zebra_printer.models import LabelDocument, PrinterEndpoint, PrinterSettings
from zebra_printer.services.log_service import log_service

Payload = Union[LabelDocument, str, bytes]


def _to_bytes(payload: Payload) -> bytes:
    if isinstance(payload, LabelDocument):
        return payload.to_bytes()
    if isinstance(payload, str):
        return payload.encode("latin1")
    return bytes(payload)


def _write_all(sock: socket.socket, data: bytes) -> int:
    view = memoryview(data)
    total = 0
    while total < len(data):
        sent = sock.send(view[total:])
        if sent == 0:
            break
        total += sent
    return total


class PrinterTransport:
    """
    Envio raw (porta 9100) para a Zebra. Cada fase usa sua própria conexão:
      1. reset  → opcional, falha é ignorada; espera settle_delay depois
      2. envio  → obrigatório; erro de conexão ou escrita sobe para o chamador
    Não há lock: dois envios simultâneos para a mesma impressora podem se
    intercalar, quem chama deve serializar.
    """

    def __init__(self, settings: PrinterSettings, sleep: Callable[[float], None] = time.sleep):
        self.settings = settings
        self._sleep = sleep

    def endpoint(self, host: Optional[str] = None, port: Optional[int] = None) -> PrinterEndpoint:
        return PrinterEndpoint.resolve(self.settings, host, port)

    def _open(self, endpoint: PrinterEndpoint, timeout: float) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        try:
            sock.connect((endpoint.host, endpoint.port))
        except OSError:
            sock.close()
            raise
        except (OverflowError, TypeError, ValueError) as e:
            # porta fora de 0-65535 ou host que não é str
            sock.close()
            raise OSError(f"Endereço inválido {endpoint}: {e}") from e
        return sock

    def reset(self, endpoint: PrinterEndpoint) -> bool:
        try:
            with self._open(endpoint, self.settings.connect_timeout) as sock:
                sock.sendall(RESET_COMMAND.encode("latin1"))
        except OSError as e:
            log_service("reset_ignorado", printer=str(endpoint), erro=str(e))
            return False

        self._sleep(self.settings.settle_delay)
        return True

    def transmit(self, payload: Payload, endpoint: PrinterEndpoint) -> int:
        data = _to_bytes(payload)
        try:
            sock = self._open(endpoint, self.settings.connect_timeout)
        except OSError as e:
            raise PrinterConnectionError(
                f"Falha ao conectar na impressora {endpoint} - {e}"
            ) from e

        with sock:
            try:
                written = _write_all(sock, data)
            except OSError as e:
                raise TransmissionError(f"Falha ao escrever em {endpoint}: {e}") from e

        if written <= 0 or written < len(data):
            raise TransmissionError(
                f"Escritos {written} de {len(data)} bytes em {endpoint}"
            )
        log_service("zpl_enviado", printer=str(endpoint), written=written)
        return written

    def send(self, payload: Payload, host: Optional[str] = None, port: Optional[int] = None) -> int:
        endpoint = self.endpoint(host, port)
        self.reset(endpoint)
        return self.transmit(payload, endpoint)

    def is_online(self, host: Optional[str] = None, port: Optional[int] = None) -> bool:
        endpoint = self.endpoint(host, port)
        try:
            with self._open(endpoint, self.settings.probe_timeout):
                return True
        except OSError:
            return False
