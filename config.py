# Global configuration for the ShareVote threshold ballot
import logging
import os


def _env(name, default, cast=str):
    value = os.environ.get(f"SHAREVOTE_{name}")
    if value is None:
        return default
    return cast(value)


class Config:
    # Network settings
    LEDGER_HOST = _env("LEDGER_HOST", "localhost")
    LEDGER_PORT = _env("LEDGER_PORT", 5000, int)

    # Field and ballot parameters (reference values, brute-forceable)
    PRIME = _env("PRIME", 2089, int)
    THRESHOLD = _env("THRESHOLD", 3, int)
    TOTAL_VOTERS = _env("TOTAL_VOTERS", 5, int)
    DEFAULT_SECRET = _env("DEFAULT_SECRET", 11, int)
    COMMITMENT_SALT_LENGTH = 16
    UPGRADE_CONTENT_LIMIT = _env("UPGRADE_CONTENT_LIMIT", 64, int)

    # Identity keys
    RSA_KEY_SIZE = _env("RSA_KEY_SIZE", 2048, int)

    # Paths
    DATA_DIR = _env("DATA_DIR", "data")
    LEDGER_STORAGE = os.path.join(DATA_DIR, "ledger.json")
    TX_LOG = os.path.join(DATA_DIR, "tx_log.json")
    CLIENT_STORAGE = os.path.join(DATA_DIR, "client_wallet.json")

    # Research parameters
    PERFORMANCE_SAMPLES = _env("PERFORMANCE_SAMPLES", 100, int)

    LOG_LEVEL = _env("LOG_LEVEL", "INFO")

    @classmethod
    def ledger_url(cls):
        return f"http://{cls.LEDGER_HOST}:{cls.LEDGER_PORT}"

    @classmethod
    def ensure_data_dir(cls, data_dir=None):
        path = data_dir or cls.DATA_DIR
        if not os.path.exists(path):
            os.makedirs(path)
        return path


def configure_logging(level=None):
    logging.basicConfig(
        level=level or Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
