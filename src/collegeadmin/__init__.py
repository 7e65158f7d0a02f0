"""College Admin - account management API for college administrators and students."""

__version__ = "0.1.0"
