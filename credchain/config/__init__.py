"""Configuration for credential resolution.

Example:
    >>> from credchain.config import CredentialSettings
    >>> settings = CredentialSettings.from_yaml("credchain.yaml")
    >>> settings.helpers
    ['cache --timeout=900']
"""

from credchain.config.settings import CredentialSettings, url_pattern_matches

__all__ = ["CredentialSettings", "url_pattern_matches"]
