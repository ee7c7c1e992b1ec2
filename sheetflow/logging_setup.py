import logging

from sheetflow.config import log_level

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def configure_logging(level=None):
    """Set up the root handler once per process; Streamlit reruns the script often."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=level or log_level(), format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    # gspread/google-auth are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    _configured = True
