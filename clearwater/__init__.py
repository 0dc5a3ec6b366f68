"""ClearWater: tap water quality lookup built on EPA SDWIS data."""

__version__ = "1.0.0"
