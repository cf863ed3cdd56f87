# zebra_printer/models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from zebra_printer.constants import (
    DEFAULT_CONNECT_TIMEOUT, DEFAULT_DARKNESS, DEFAULT_DPI, DEFAULT_IP, DEFAULT_MAGICK_BINARY,
    DEFAULT_PAGE_WIDTH_DOTS, DEFAULT_PORTA, DEFAULT_PROBE_TIMEOUT,
    DEFAULT_RASTER_ENGINE, DEFAULT_SETTLE_DELAY, MAX_DARKNESS, MIN_DARKNESS,
    RASTER_ENGINES,
)
from zebra_printer.errors import PackingError


class ThermalMode(Enum):
    DIRECT_THERMAL = "D"
    THERMAL_TRANSFER = "T"


@dataclass(frozen=True)
class PrinterSettings:
    """
    Configuração imutável da impressora. Criada uma vez no startup e passada
    explicitamente para quem precisa.
    """
    dpi: int = DEFAULT_DPI
    thermal_mode: ThermalMode = ThermalMode.DIRECT_THERMAL
    darkness: int = DEFAULT_DARKNESS
    page_width_dots: int = DEFAULT_PAGE_WIDTH_DOTS
    default_host: str = DEFAULT_IP
    default_port: int = DEFAULT_PORTA
    raster_engine: str = DEFAULT_RASTER_ENGINE
    magick_binary: str = DEFAULT_MAGICK_BINARY
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY

    def __post_init__(self):
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got {self.dpi}")
        if not MIN_DARKNESS <= self.darkness <= MAX_DARKNESS:
            raise ValueError(
                f"darkness must be between {MIN_DARKNESS} and {MAX_DARKNESS}, got {self.darkness}"
            )
        if self.page_width_dots <= 0:
            raise ValueError(f"page_width_dots must be positive, got {self.page_width_dots}")
        if not 0 < self.default_port < 65536:
            raise ValueError(f"invalid printer port {self.default_port}")
        if self.raster_engine not in RASTER_ENGINES:
            raise ValueError(f"unknown raster engine {self.raster_engine!r}")

    @property
    def direct_thermal(self) -> bool:
        return self.thermal_mode is ThermalMode.DIRECT_THERMAL


@dataclass(frozen=True)
class PrinterEndpoint:
    host: str
    port: int

    @classmethod
    def resolve(cls, settings: PrinterSettings,
                host: Optional[str] = None, port: Optional[int] = None) -> "PrinterEndpoint":
        return cls(host or settings.default_host, port or settings.default_port)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class TargetGeometry:
    margin_dots: int
    target_width: int
    target_height: int
    label_length_dots: int


@dataclass
class BilevelBitmap:
    """
    Grade de pixels 0/1 (1 = imprime escuro), uma lista por linha.
    `bottom_up` indica que as linhas vieram de baixo para cima (BMP).
    """
    width: int
    height: int
    rows: Sequence[Sequence[int]]
    bottom_up: bool = False

    def top_down_rows(self) -> List[Sequence[int]]:
        return list(reversed(self.rows)) if self.bottom_up else list(self.rows)


@dataclass(frozen=True)
class PackedPayload:
    width: int
    height: int
    bytes_per_row: int
    total_bytes: int
    hex_payload: str = field(repr=False)

    def __post_init__(self):
        if len(self.hex_payload) != 2 * self.total_bytes:
            raise PackingError(
                f"hex payload has {len(self.hex_payload)} chars, expected {2 * self.total_bytes}"
            )


@dataclass(frozen=True)
class LabelDocument:
    lines: Tuple[str, ...]

    def to_zpl(self) -> str:
        return "\n".join(self.lines) + "\n"

    def to_bytes(self) -> bytes:
        return self.to_zpl().encode("latin1")

    @property
    def size(self) -> int:
        return len(self.to_bytes())
