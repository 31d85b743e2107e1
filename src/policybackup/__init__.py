"""
PolicyBackup - ADMX and Group Policy Object backup for domain controllers
"""

__version__ = "0.1.0"

from .core import PolicyBackup
from .errors import PolicyBackupError

__all__ = ["PolicyBackup", "PolicyBackupError"]
