# logger_setup.py

import logging
import os
import json

LOGGER_NAME = "psy_vis"
LOG_ROOT = 'runs'


def run_log_path(run_id: str) -> str:
    """Returns runs/<run_id>/session.log, creating the run directory."""
    log_dir = os.path.join(LOG_ROOT, run_id)
    os.makedirs(log_dir, exist_ok=True)
    return os.path.join(log_dir, 'session.log')


def setup_logging(config_path='config.json'):
    """
    Configures the visualizer's logger from the config file.

    Only the dedicated "psy_vis" logger is touched, never the root logger, so
    SDL and Numba stay quiet. Records go to the console and to a per-run
    session log.

    Data Contract:
    - Inputs: config_path (str) - Path to the configuration file.
    - Outputs: The configured logging.Logger.
    - Side Effects:
        - Replaces any handlers previously attached to "psy_vis".
        - Creates runs/<run_id>/ under the working directory.
    - Invariants: The config holds 'run_id' and a 'logging' dictionary
      with 'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    # Re-running setup (tests, restarts) must not stack duplicate handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_file = run_log_path(config['run_id'])
    formatter = logging.Formatter(log_config['format'])
    for handler in (logging.FileHandler(log_file), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized. Run ID: {config['run_id']}. Log file: {log_file}")
    return logger
