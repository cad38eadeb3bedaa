"""
Configuration input for geoNURBS.
"""

from .config import NumericSettings, DEFAULT_SETTINGS, load_config, settings_from_dict
