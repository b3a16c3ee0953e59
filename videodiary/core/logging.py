"""
Logging setup with secret masking.
"""
import logging
import re


# Patterns masked in every log line
_SECRET_PATTERNS = [
    (re.compile(r"(MUX_TOKEN_SECRET\s*[=:]\s*)\S+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(MUX_WEBHOOK_SECRET\s*[=:]\s*)\S+", re.IGNORECASE), r"\1***"),
    (re.compile(r"(v1=)[0-9a-fA-F]{16,}"), r"\1***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9\-_\.]+"), r"\1***"),
    (re.compile(r"(sk-)[A-Za-z0-9\-_]{8,}"), r"\1***"),
]


class SecretFilter(logging.Filter):
    """Masks credentials and signatures in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = mask_secrets(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: mask_secrets(v) if isinstance(v, str) else v for k, v in record.args.items()}
            else:
                record.args = tuple(mask_secrets(a) if isinstance(a, str) else a for a in record.args)
        return True


def mask_secrets(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configures the `videodiary` logger once: console output with secrets masked.
    Library loggers are quieted to WARNING.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger("videodiary")
    logger.setLevel(level)

    if logger.handlers:
        return logger  # already configured

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.addFilter(SecretFilter())
    logger.addHandler(console)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger
