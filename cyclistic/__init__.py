"""Cyclistic bike-share EDA: clean the monthly trip extracts, then compare members and casual riders."""

__version__ = '1.0.0'
