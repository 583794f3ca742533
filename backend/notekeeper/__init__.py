"""Notekeeper API: OTP-authenticated personal notes."""

__version__ = "1.0.0"
