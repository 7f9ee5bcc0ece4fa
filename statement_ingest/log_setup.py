import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_dir: str = 'logs', console_level: str = 'INFO',
                  log_filename: str = 'statement_ingest.log') -> logging.Logger:
    """Console handler at ``console_level`` plus a DEBUG file handler in ``log_dir``.

    Safe to call more than once; handlers are only installed the first time.
    """
    root_logger = logging.getLogger()
    if getattr(root_logger, '_statement_ingest_configured', False):
        return root_logger

    os.makedirs(log_dir, exist_ok=True)
    root_logger.setLevel(logging.DEBUG)
    log_formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, str(console_level).upper(), logging.INFO))
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    file_handler = logging.FileHandler(os.path.join(log_dir, log_filename), mode='a')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(log_formatter)
    root_logger.addHandler(file_handler)

    root_logger._statement_ingest_configured = True
    return root_logger
