"""Internal Poller – stößt Schedule-Ausführung und Outlook-Polling periodisch an."""

__version__ = "0.1.0"
