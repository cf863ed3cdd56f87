# Arquivos
CONFIG_FILE_NAME = "config.txt"
ENV_PREFIX       = "ZEBRA_"

# Defaults da impressora
DEFAULT_DPI             = 203
DEFAULT_DIRECT_THERMAL  = True
DEFAULT_DARKNESS        = 30
DEFAULT_PAGE_WIDTH_DOTS = 832
DEFAULT_IP              = "172.21.54.45"
DEFAULT_PORTA           = 9100

MIN_DARKNESS = 0
MAX_DARKNESS = 30

# Rasterização
RASTER_ENGINES        = ("pillow", "magick")
DEFAULT_RASTER_ENGINE = "pillow"
DEFAULT_MAGICK_BINARY = "convert"

# Transporte (segundos)
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_PROBE_TIMEOUT   = 2.0
DEFAULT_SETTLE_DELAY    = 0.2
RESET_COMMAND           = "^XA^JUS^XZ\n"

# Margem (cm) aceita pela API
DEFAULT_MARGIN_CM = 1.0
MAX_MARGIN_CM     = 5.0
