import logging
import os
from typing import Optional

APP_NAME: str = "Buku Kas Desa Adat"
CURRENCY: str = "IDR"

# Kas di Bendahara: the cash side of every automatic posting
CASH_ACCOUNT_CODE: str = "1.1.1.01"
CASH_ACCOUNT_LABEL: str = "Kas di Bendahara Desa"

DEFAULT_ACCOUNT_CODE: str = "00.00"
OTHER_CATEGORY_LABEL: str = "Lain-lain"

# allowed |pending amount - nota total| before a disbursement is rejected
NOTA_TOLERANCE: int = 2

# "strict" | "surface_unbudgeted"
REALIZATION_POLICY: str = "strict"

SEED_PATH: str = "data/seed.json"

LOG_LEVEL: str = os.environ.get("BUKUKAS_LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once, for the entry point only."""
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
