import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
  root = logging.getLogger()
  resolved = logging.getLevelName(str(level).upper())
  if not isinstance(resolved, int):
    resolved = logging.INFO
  if not root.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
  root.setLevel(resolved)
