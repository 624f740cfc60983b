"""
PhotoBridge - photo backup between Android devices over ADB.

Discovers attached devices, recognises the configured backup device and
reconciles photo folders between an origin device, the local machine and
the backup device, copying only what is missing or changed.
"""

__version__ = "0.1.0"
__author__ = "PhotoBridge Contributors"
