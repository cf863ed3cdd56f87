from flask import Flask, jsonify

from zebra_printer.models import PrinterSettings
from zebra_printer.routes.api import bp as api_bp
from zebra_printer.services.log_service import log_exception
from zebra_printer.services.printer_service import ZebraPrinter


def create_app(settings: PrinterSettings, printer: ZebraPrinter = None, dirs: dict = None) -> Flask:
    app = Flask(__name__)

    # Instância única da impressora, injetada nas rotas via config
    app.config["SETTINGS"] = settings
    app.config["PRINTER"]  = printer or ZebraPrinter(settings)
    app.config["DIRS"]     = dirs or {}

    app.register_blueprint(api_bp)

    # Handler simples pra logar 500 com stack
    @app.errorhandler(500)
    def _err500(e):
        log_exception("Erro 500 na requisição")
        return jsonify({"success": False, "message": "Erro interno. Consulte error.log"}), 500

    return app
