"""Devflow - multi-stack developer workflow runner"""

__version__ = "0.4.0"
