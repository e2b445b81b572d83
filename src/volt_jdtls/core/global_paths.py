"""Per-user directories used by the plugin outside of its volt directory."""

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "volt-jdtls"


class GlobalPath:
    """Platform-specific directory lookup."""

    @classmethod
    def data(cls) -> str:
        """Application data directory, overridable for tests."""
        override = os.environ.get("VOLT_JDTLS_TEST_HOME")
        if override:
            return str(Path(override) / "data")
        return user_data_dir(APP_NAME)

    @classmethod
    def log(cls) -> str:
        return str(Path(cls.data()) / "log")
