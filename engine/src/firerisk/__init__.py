"""firerisk: wildfire danger, spread forecasting and response targeting."""

__version__ = "1.0.0"
