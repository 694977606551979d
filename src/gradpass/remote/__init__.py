"""Remote check-in store: HTTP client and server contract.

Usage:
    from gradpass.remote import CheckInClient

    client = CheckInClient("https://venue.example/api/checkins")
    result = client.submit(record.to_dict())
"""
from gradpass.remote.client import CheckInClient, SubmitResult
from gradpass.remote.contract import InMemoryCheckInStore, validate_checkin_body
from gradpass.remote.loopback import LoopbackClient

__all__ = [
    "CheckInClient",
    "SubmitResult",
    "InMemoryCheckInStore",
    "validate_checkin_body",
    "LoopbackClient",
]
