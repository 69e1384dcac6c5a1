"""Pair wireless earbuds through bluetoothctl with a temporary BR/EDR-only controller."""

__version__ = "0.1.0"
