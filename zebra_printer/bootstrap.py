import os
from pathlib import Path

from zebra_printer.constants import CONFIG_FILE_NAME


def get_programdata_root() -> Path:
    override = os.environ.get("ZEBRA_PRINTER_HOME")
    if override:
        return Path(override)
    base = os.environ.get("PROGRAMDATA") or ("/var/lib" if os.name != "nt" else r"C:\ProgramData")
    return Path(base) / "ZebraPrinter"


def init_data_layout(root: Path = None) -> dict:
    root = Path(root) if root else get_programdata_root()
    dirs = {
        "root": root,
        "config": root / "config",
        "logs": root / "logs",
    }
    for p in dirs.values():
        p.mkdir(parents=True, exist_ok=True)

    dirs["config_file"] = dirs["config"] / CONFIG_FILE_NAME
    return dirs
