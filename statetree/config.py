"""
Store settings.

Environment Variables:
    STATETREE_ENV: "production" disables raw module validation - default: development
    STATETREE_STRICT: Enable strict mode (true/false) - default: false
    STATETREE_DEVTOOLS: Attach the process devtool hook (true/false) - default: false
"""

import os
from typing import Optional

from pydantic import BaseModel

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class StoreSettings(BaseModel):
    strict: bool = False
    devtools: bool = False
    production: bool = False

    @classmethod
    def from_env(cls) -> "StoreSettings":
        return cls(
            strict=_env_flag("STATETREE_STRICT"),
            devtools=_env_flag("STATETREE_DEVTOOLS"),
            production=os.getenv("STATETREE_ENV", "development").strip().lower() == "production",
        )

    def override(
        self,
        strict: Optional[bool] = None,
        devtools: Optional[bool] = None,
        production: Optional[bool] = None,
    ) -> "StoreSettings":
        """Return a copy with every explicitly given flag replaced."""
        updates = {
            key: value
            for key, value in (
                ("strict", strict),
                ("devtools", devtools),
                ("production", production),
            )
            if value is not None
        }
        return self.model_copy(update=updates)
