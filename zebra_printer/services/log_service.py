# zebra_printer/services/log_service.py
import logging
from flask import has_request_context, request

from zebra_printer.services.logging_setup import AUDIT_LOGGER, ERROR_LOGGER, SERVICE_LOGGER

# ---------------------------------------------------------
# Insere dados do contexto HTTP automaticamente
# ---------------------------------------------------------
def _with_request_context(data: dict) -> dict:
    if has_request_context():
        data.setdefault("client_ip", request.remote_addr)
        data.setdefault("method", request.method)
        data.setdefault("path", request.path)
        data.setdefault("user_agent",
                        getattr(request, "user_agent", None)
                        and request.user_agent.string)
    return data


# ---------------------------------------------------------
# Logs gerais do sistema (INFO)
# ---------------------------------------------------------
def log_service(message: str, **meta):
    logging.getLogger(SERVICE_LOGGER).info(message, extra=_with_request_context(meta))


# ---------------------------------------------------------
# Logs de auditoria
# ---------------------------------------------------------
def log_audit(action: str, **meta):
    logging.getLogger(AUDIT_LOGGER).info(action, extra=_with_request_context(meta))


# ---------------------------------------------------------
# Logs de erro
# ---------------------------------------------------------
def log_error(message: str, **meta):
    logging.getLogger(ERROR_LOGGER).error(message, extra=_with_request_context(meta))


def log_exception(message: str, **meta):
    logging.getLogger(ERROR_LOGGER).exception(message, extra=_with_request_context(meta))
