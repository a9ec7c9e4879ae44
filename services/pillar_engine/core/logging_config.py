import logging
import sys

from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = record.created
        if log_record.get('level'):
            log_record['level'] = log_record['level'].upper()
        else:
            log_record['level'] = record.levelname

        log_record['module'] = record.module
        log_record['lineno'] = record.lineno


def setup_logging(log_level_str: str = "INFO", json_logs: bool = True):
    """
    Configures logging for processes that embed the pillar engine.
    Safe to call more than once; the handler is only installed the first time.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(getattr(h, '_pillar_engine_handler', False) for h in root_logger.handlers):
        root_logger.debug(f"Logging already configured. Current level: {logging.getLevelName(root_logger.getEffectiveLevel())}")
        return

    log_handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(module)s %(lineno)d %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_handler.setFormatter(formatter)
    log_handler._pillar_engine_handler = True
    root_logger.addHandler(log_handler)
    root_logger.info(f"Logging configured with level: {logging.getLevelName(log_level)}")
