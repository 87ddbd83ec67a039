"""Keyboard firmware core: event routing, layered keymaps, power, split link and underglow."""

__version__ = "0.1.0"

__all__ = [
    "events",
    "ext_power",
    "keymap",
    "power",
    "rgb_underglow",
    "sensors",
    "split_central",
    "split_service",
    "unpair_combo",
    "usb",
]