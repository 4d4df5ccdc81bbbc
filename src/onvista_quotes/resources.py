import importlib.resources
from pathlib import Path

PACKAGE_DATA_PATH = "onvista_quotes.data"
DEFAULTS_FILE = "defaults.yaml"


def get_defaults_path() -> Path:
    """Returns the path to the bundled default settings."""
    return importlib.resources.files(PACKAGE_DATA_PATH).joinpath(DEFAULTS_FILE)
