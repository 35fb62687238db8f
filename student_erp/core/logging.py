import logging

from student_erp.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # uvicorn installs its own handlers; keep SQL echo quiet unless asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
