"""Remote endpoint and local storage configuration.

Values come from the environment so the same build runs against a staging
endpoint on a laptop and the venue endpoint on the door devices.
"""
import os
from pathlib import Path

from gradpass.core.constants import (
    DEFAULT_OPERATOR,
    DEFAULT_PROBE_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
)

# Check-in endpoint (POST to record, GET ?ceremonyId= to list)
CHECKINS_URL = os.environ.get("GRADPASS_CHECKINS_URL", "http://localhost:3000/api/checkins")

# Seconds before a remote write is abandoned and queued
TIMEOUT_SECONDS = float(os.environ.get("GRADPASS_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))

# Offline queue directory
QUEUE_DIR = Path(os.environ.get("GRADPASS_QUEUE_DIR", Path.home() / ".gradpass" / "offline"))

# Label stamped on check-ins from this device
OPERATOR = os.environ.get("GRADPASS_OPERATOR", DEFAULT_OPERATOR)

# Connectivity poll interval for `gradpass offline watch`
PROBE_INTERVAL_SECONDS = float(
    os.environ.get("GRADPASS_PROBE_INTERVAL", DEFAULT_PROBE_INTERVAL_SECONDS)
)
