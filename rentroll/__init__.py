"""RentRoll: rental contracts with tiered rent, occupancy and revenue reporting."""

__version__ = "1.0.0"
