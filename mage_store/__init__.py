"""
MAGE local store.

On-device persistence for location observations and the active server
settings of a mobile geospatial-intelligence client.
"""

__version__ = "0.1.0"
__description__ = "Local persistence for MAGE locations and server settings"
