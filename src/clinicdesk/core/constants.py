"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_USERNAME_LENGTH = 64
MAX_NAME_LENGTH = 255

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72  # bcrypt ignores anything past 72 bytes
BCRYPT_ROUNDS = 12

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32
SESSION_ID_LENGTH = 24

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
