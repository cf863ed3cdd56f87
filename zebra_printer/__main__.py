import argparse
import os

from zebra_printer.app import create_app
from zebra_printer.bootstrap import init_data_layout
from zebra_printer.services.log_service import log_service
from zebra_printer.services.logging_setup import setup_logging
from zebra_printer.services.settings_service import load_settings


def main(argv=None):
    parser = argparse.ArgumentParser(prog="zebra_printer",
                                     description="API de impressão de imagens em Zebra (ZPL)")
    parser.add_argument("--host", default=os.environ.get("ZEBRA_API_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("ZEBRA_API_PORT", "8000")))
    parser.add_argument("--config", help="caminho do config.txt (padrão: ProgramData)")
    args = parser.parse_args(argv)

    # --- ProgramData + logs ---
    dirs = init_data_layout()
    setup_logging(dirs["logs"])
    settings = load_settings(args.config or dirs["config_file"])

    app = create_app(settings, dirs=dirs)

    log_service("startup", printer=f"{settings.default_host}:{settings.default_port}",
                dpi=settings.dpi, raster_engine=settings.raster_engine)
    try:
        app.run(host=args.host, port=args.port, debug=False, use_reloader=False, threaded=True)
    finally:
        log_service("shutdown")


if __name__ == "__main__":
    main()
