"""cupslog - CUPS page_log usage and cost analyzer."""

__version__ = "0.1.0"
