"""Court reservation backend: availability, holds, confirmations, payment and attendance."""

__version__ = "0.1.0"
