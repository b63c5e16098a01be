"""Enumerations used across the cake-day calculator."""

from enum import Enum


class CakeSize(str, Enum):
    SMALL = "small"
    LARGE = "large"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
