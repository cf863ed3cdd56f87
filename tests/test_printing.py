import socket
import time
from dataclasses import replace

import pytest

from zebra_printer.constants import RESET_COMMAND
from zebra_printer.errors import PrinterConnectionError, TransmissionError
from zebra_printer.models import LabelDocument, PrinterEndpoint
from zebra_printer.services.printing_service import PrinterTransport

DOC = LabelDocument(("^XA", "^FO0,0", "^XZ"))


def test_send_resets_then_transmits(settings, listener, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    written = transport.send(DOC, "127.0.0.1", listener.port)

    assert written == len(DOC.to_bytes())
    received = listener.wait_for(2)
    assert received[0] == RESET_COMMAND.encode()
    assert received[1] == b"^XA\n^FO0,0\n^XZ\n"
    assert fake_sleep.calls == [settings.settle_delay]


def test_send_uses_settings_endpoint(listener, fake_sleep, settings) -> None:
    transport = PrinterTransport(replace(settings, default_port=listener.port), sleep=fake_sleep)
    transport.send("^XA^XZ")
    assert listener.wait_for(2)[1] == b"^XA^XZ"


def test_refused_endpoint_raises_connection_error(settings, closed_port, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    with pytest.raises(PrinterConnectionError) as exc:
        transport.send(DOC, "127.0.0.1", closed_port)
    assert exc.value.kind == "ConnectionError"
    # reset também falhou: nenhuma espera
    assert fake_sleep.calls == []


def test_reset_failure_is_absorbed(settings, closed_port, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    assert transport.reset(PrinterEndpoint("127.0.0.1", closed_port)) is False
    assert fake_sleep.calls == []


def test_empty_document_is_a_transmission_error(settings, listener, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    with pytest.raises(TransmissionError):
        transport.transmit(b"", PrinterEndpoint("127.0.0.1", listener.port))


def test_write_failure_is_a_transmission_error(settings, listener, monkeypatch) -> None:
    def broken_send(self, data):
        raise BrokenPipeError("pipe")

    transport = PrinterTransport(settings)
    monkeypatch.setattr(socket.socket, "send", broken_send)
    with pytest.raises(TransmissionError):
        transport.transmit(DOC, PrinterEndpoint("127.0.0.1", listener.port))


def test_is_online(settings, listener, closed_port) -> None:
    transport = PrinterTransport(settings)
    for port, expected in ((listener.port, True), (closed_port, False)):
        started = time.monotonic()
        assert transport.is_online("127.0.0.1", port) is expected
        assert time.monotonic() - started < settings.probe_timeout + 1.0


def test_port_out_of_range_is_offline(settings, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    assert transport.is_online("127.0.0.1", 70000) is False
    assert transport.reset(PrinterEndpoint("127.0.0.1", 70000)) is False
    with pytest.raises(PrinterConnectionError):
        transport.send(b"^XA^XZ", "127.0.0.1", 70000)
    assert fake_sleep.calls == []


def test_non_string_host_is_a_connection_error(settings, fake_sleep) -> None:
    transport = PrinterTransport(settings, sleep=fake_sleep)
    assert transport.is_online(1234, 9100) is False
    with pytest.raises(PrinterConnectionError):
        transport.transmit(DOC, PrinterEndpoint(1234, 9100))


def test_is_online_never_raises_on_dns_failure(settings) -> None:
    transport = PrinterTransport(settings)
    assert transport.is_online("printer.invalid", 9100) is False


def test_endpoint_override(settings) -> None:
    transport = PrinterTransport(settings)
    assert transport.endpoint() == PrinterEndpoint("127.0.0.1", 9100)
    assert transport.endpoint("10.0.0.9") == PrinterEndpoint("10.0.0.9", 9100)
    assert transport.endpoint(port=6101) == PrinterEndpoint("127.0.0.1", 6101)
