"""Business value quantification engine: ROI/NPV/IRR scenarios and Monte Carlo risk."""

__version__ = "0.2.0"
