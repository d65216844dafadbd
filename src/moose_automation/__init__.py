"""
Moose Automation

HTTP service that drives a headless browser to validate fraternal-unit
credentials on the Moose International portal and download roster exports.
"""

__version__ = "1.0.0"
