"""Warden - Fixed security limits and known command names

These limits are part of the validation contract and are intentionally not
exposed through Settings.
"""

from enum import Enum


class CommandName(str, Enum):
    """External commands the allowlist knows about"""

    GIT = "git"
    SSH_ADD = "ssh-add"
    SSH_KEYGEN = "ssh-keygen"


# POSIX PATH_MAX, measured in UTF-8 bytes
PATH_MAX = 4096

# Command argument bounds
MAX_ARGS_COUNT = 20
MAX_ARG_LENGTH = 256

# Short flag bounds
MAX_FLAG_LENGTH = 50
MAX_COMBINED_FLAG_CHARS = 10

# Log sanitization bounds
MAX_PATTERN_CHECK_LENGTH = 1000
MAX_LOG_STRING_LENGTH = 50
MIN_SECRET_LENGTH = 32
MAX_SECRET_LENGTH = 256
MAX_ID_LENGTH = 64
MAX_LOG_MESSAGE_SIZE = 10000
