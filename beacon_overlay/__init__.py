"""Overlay beacons: markers anchored to widgets of a Qt widget tree."""

from beacon_overlay.beacons import Beacons
from beacon_overlay.descriptors import BeaconDescriptor
from beacon_overlay.handlers import ClickHandlerRegistry
from beacon_overlay.options import BeaconOptions

__version__ = "0.1.0"

__all__ = ["Beacons", "BeaconDescriptor", "BeaconOptions", "ClickHandlerRegistry", "__version__"]
