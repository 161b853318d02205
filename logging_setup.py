import logging
import os
from logging.handlers import RotatingFileHandler

from dosage_config import LOG_FILE, LOG_LEVEL

_TAG = "dosage"


def _mk_handler(path):
    h = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    h.setFormatter(fmt)
    h._dosage_tag = _TAG
    return h


def configure_logging(log_dir, level=LOG_LEVEL):
    # root -> rotating logfile in the data dir + console
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_dosage_tag", "") == _TAG for h in root.handlers):
        os.makedirs(log_dir, exist_ok=True)
        root.addHandler(_mk_handler(os.path.join(log_dir, LOG_FILE)))
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        console._dosage_tag = _TAG
        root.addHandler(console)

    # ReconciliationWarning and friends go to the log instead of stderr
    logging.captureWarnings(True)
