"""Configuration module - re-exports all config values."""
from .paths import *
from .engine import *
from .server import *
