"""
Services for the MAGE local store.

- server_config: process-wide server URL / current event with acknowledged saves
- location_store: create, re-sync, reassign and expire location observations
"""

from .location_store import LocationStore
from .server_config import SaveCompletion, SaveOutcome, ServerConfig

__all__ = ["LocationStore", "SaveCompletion", "SaveOutcome", "ServerConfig"]
