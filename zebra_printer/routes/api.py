# zebra_printer/routes/api.py
"""
API JSON de impressão de imagens.
Endpoints:
  POST /api/print        → imprime uma imagem (checa se a impressora está online)
  POST /api/print/batch  → imprime várias; falha de um item não para o lote
  POST /api/preview      → só converte e devolve o ZPL + tamanho
  GET  /api/status       → impressora online?
"""
import numbers

from flask import Blueprint, request, jsonify, current_app

from zebra_printer.constants import DEFAULT_MARGIN_CM, MAX_MARGIN_CM
from zebra_printer.services.log_service import log_error
from zebra_printer.services.trace_service import start_trace

bp = Blueprint("api", __name__, url_prefix="/api")


class _BadRequest(Exception):
    pass


def _printer():
    return current_app.config["PRINTER"]


def _payload() -> dict:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise _BadRequest("JSON inválido")
    return data


def _margin(data: dict) -> float:
    margin = data.get("margin")
    if margin is None:
        return DEFAULT_MARGIN_CM
    if isinstance(margin, bool) or not isinstance(margin, numbers.Real):
        raise _BadRequest("margin precisa ser numérico")
    if not 0 <= margin <= MAX_MARGIN_CM:
        raise _BadRequest(f"margin precisa estar entre 0 e {MAX_MARGIN_CM:g}")
    return float(margin)


def _image_path(item) -> str:
    path = item.get("image_path") if isinstance(item, dict) else None
    if not isinstance(path, str) or not path.strip():
        raise _BadRequest("image_path é obrigatório")
    return path.strip()


@bp.errorhandler(_BadRequest)
def _bad_request(e):
    return jsonify({"success": False, "message": str(e)}), 400


@bp.route("/print", methods=["POST"])
def print_label():
    data = _payload()
    image_path = _image_path(data)
    margin = _margin(data)

    trace = start_trace("impressao_api")
    trace.add("request", image_path=image_path, margin=margin)

    printer = _printer()
    if not printer.is_online():
        trace.add("printer_offline")
        trace.finish("falha")
        return jsonify({"success": False, "message": "Printer is offline"}), 503

    result = printer.print_result(image_path, margin)
    if not result.success:
        trace.add("print_failed", erro=result.kind, detalhe=result.message)
        trace.finish("erro")
        log_error("Falha na impressão", erro=result.kind, detalhe=result.message)
        return jsonify({
            "success": False,
            "error": result.kind,
            "message": f"Printing failed: {result.message}",
        }), 500

    trace.add("print_success")
    trace.finish("sucesso")
    return jsonify({"success": True, "message": "Label printed successfully"})


@bp.route("/print/batch", methods=["POST"])
def print_batch():
    data = _payload()
    labels = data.get("labels")
    if not isinstance(labels, list) or not labels:
        raise _BadRequest("labels precisa ser uma lista não vazia")
    paths = [_image_path(label) for label in labels]
    margin = _margin(data)

    trace = start_trace("impressao_lote")
    printer = _printer()
    results = {"success": 0, "failed": 0, "errors": []}

    for path in paths:
        result = printer.print_result(path, margin)
        if result.success:
            results["success"] += 1
            trace.add("print_success", image_path=path)
        else:
            results["failed"] += 1
            results["errors"].append({"file": path, "error": result.kind, "message": result.message})
            trace.add("print_failed", image_path=path, erro=result.kind)

    trace.finish("sucesso" if not results["failed"] else "parcial")
    return jsonify({"success": True, "results": results})


@bp.route("/preview", methods=["POST"])
def preview():
    data = _payload()
    image_path = _image_path(data)
    margin = _margin(data)

    result = _printer().preview(image_path, margin)
    if not result.success:
        return jsonify({
            "success": False,
            "error": result.kind,
            "message": f"Conversion failed: {result.message}",
        }), 500
    return jsonify(result.to_dict())


@bp.route("/status", methods=["GET"])
def status():
    settings = current_app.config["SETTINGS"]
    return jsonify({
        "online": _printer().is_online(),
        "ip": settings.default_host,
        "port": settings.default_port,
    })
