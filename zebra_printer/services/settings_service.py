import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from zebra_printer.constants import (
    DEFAULT_DARKNESS, DEFAULT_DIRECT_THERMAL, DEFAULT_DPI, DEFAULT_IP, DEFAULT_MAGICK_BINARY,
    DEFAULT_PAGE_WIDTH_DOTS, DEFAULT_PORTA, DEFAULT_RASTER_ENGINE, ENV_PREFIX,
)
from zebra_printer.models import PrinterSettings, ThermalMode

KEYS = ("DPI", "DIRECT_THERMAL", "DARKNESS", "PAGE_WIDTH_DOTS",
        "PRINTER_IP", "PRINTER_PORT", "RASTER_ENGINE", "MAGICK_BINARY")

_TRUE  = {"1", "true", "yes", "sim", "on"}
_FALSE = {"0", "false", "no", "nao", "não", "off"}


def read_config_file(path: Path) -> Dict[str, str]:
    """Lê um config.txt no formato CHAVE=valor (linhas com # são ignoradas)."""
    values = {}
    if not path.exists():
        return values
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, val = line.split("=", 1)
            values[key.strip().upper()] = val.strip()
    return values


def _parse_int(raw: Dict[str, str], key: str, default: int) -> int:
    if key not in raw:
        return default
    try:
        return int(raw[key])
    except ValueError:
        raise ValueError(f"{key} precisa ser inteiro, recebido {raw[key]!r}") from None


def _parse_bool(raw: Dict[str, str], key: str, default: bool) -> bool:
    if key not in raw:
        return default
    val = raw[key].lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{key} precisa ser true/false, recebido {raw[key]!r}")


def load_settings(config_file: Optional[Path] = None,
                  environ: Optional[Mapping[str, str]] = None) -> PrinterSettings:
    """
    Monta o PrinterSettings: defaults → config.txt → variáveis ZEBRA_*.
    """
    environ = os.environ if environ is None else environ
    raw = read_config_file(Path(config_file)) if config_file else {}
    for key in KEYS:
        env_val = environ.get(ENV_PREFIX + key)
        if env_val is not None and env_val.strip():
            raw[key] = env_val.strip()

    direct = _parse_bool(raw, "DIRECT_THERMAL", DEFAULT_DIRECT_THERMAL)
    return PrinterSettings(
        dpi=_parse_int(raw, "DPI", DEFAULT_DPI),
        thermal_mode=ThermalMode.DIRECT_THERMAL if direct else ThermalMode.THERMAL_TRANSFER,
        darkness=_parse_int(raw, "DARKNESS", DEFAULT_DARKNESS),
        page_width_dots=_parse_int(raw, "PAGE_WIDTH_DOTS", DEFAULT_PAGE_WIDTH_DOTS),
        default_host=raw.get("PRINTER_IP", DEFAULT_IP),
        default_port=_parse_int(raw, "PRINTER_PORT", DEFAULT_PORTA),
        raster_engine=raw.get("RASTER_ENGINE", DEFAULT_RASTER_ENGINE).lower(),
        magick_binary=raw.get("MAGICK_BINARY", DEFAULT_MAGICK_BINARY),
    )
