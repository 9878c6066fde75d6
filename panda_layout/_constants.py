"""Common literal values used across panda_layout.

Examples
--------
>>> from panda_layout import _constants
>>> _constants.DEFAULT_SPLIT_RIGHT_ACCOUNT_ID
456
"""

from pathlib import Path

DEFAULT_SPLIT_RIGHT_ACCOUNT_ID = 456
DEFAULT_CONFIG = Path("config/dashboard.yaml")
ENV_PREFIX = "DASHBOARD_"
