# zebra_printer/services/logging_setup.py
import os, json, socket, logging, time
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler

APP_NAME      = "ZebraPrinter"
APP_VERSION   = os.environ.get("ZEBRA_APP_VERSION", "dev")
ENVIRONMENT   = os.environ.get("ZEBRA_ENV", "prd")   # prd|hml|dev
HOSTNAME      = socket.gethostname()
PROCESS_ID    = os.getpid()

SERVICE_LOGGER = "zebra_printer.service"
AUDIT_LOGGER   = "zebra_printer.audit"
ERROR_LOGGER   = "zebra_printer.error"

_RESERVED = frozenset((
    "msg", "args", "levelno", "levelname", "name", "created", "msecs",
    "relativeCreated", "pathname", "filename", "module", "lineno", "funcName",
    "thread", "threadName", "process", "processName", "taskName",
    "exc_info", "exc_text", "stack_info", "stacklevel", "message",
))


class JsonFormatter(logging.Formatter):
    # Gera uma linha JSON por registro
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts":        time.strftime("%Y-%m-%dT%H:%M:%S%z", time.localtime(record.created)),
            "level":     record.levelname,
            "logger":    record.name,
            "message":   record.getMessage(),
            "app":       APP_NAME,
            "version":   APP_VERSION,
            "env":       ENVIRONMENT,
            "host":      HOSTNAME,
            "pid":       PROCESS_ID,
            "module":    record.module,
            "func":      record.funcName,
        }
        # Extras vindos de logger.info("msg", extra={...})
        for k, v in record.__dict__.items():
            if k not in base and k not in _RESERVED:
                base[k] = v
        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def _make_handler(path: Path) -> TimedRotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    h = TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        backupCount=7,           # mantém 7 dias
        encoding="utf-8",
        utc=False
    )
    h.setFormatter(JsonFormatter())
    return h


def setup_logging(logs_dir: Path, console: bool = None) -> dict:
    """
    Cria 3 loggers:
      - zebra_printer.service → conversões, envios, probes
      - zebra_printer.audit   → traces de requisição (uma linha por impressão)
      - zebra_printer.error   → falhas e exceções
    Retorna os loggers em um dict.
    """
    logs_dir = Path(logs_dir)
    paths = {
        SERVICE_LOGGER: logs_dir / "service.log",
        AUDIT_LOGGER:   logs_dir / "audit.log",
        ERROR_LOGGER:   logs_dir / "error.log",
    }

    # Evita duplicar handlers se setup_logging for chamado 2x
    loggers = {}
    for name, path in paths.items():
        logger = logging.getLogger(name)
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.propagate = False
        logger.setLevel(logging.INFO)
        logger.addHandler(_make_handler(path))
        loggers[name] = logger

    loggers[ERROR_LOGGER].setLevel(logging.WARNING)

    if console is None:
        console = ENVIRONMENT != "prd"
    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(JsonFormatter())
        for logger in loggers.values():
            logger.addHandler(stream)

    return {
        "service": loggers[SERVICE_LOGGER],
        "audit":   loggers[AUDIT_LOGGER],
        "error":   loggers[ERROR_LOGGER],
    }
