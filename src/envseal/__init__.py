"""
envseal -- bulk-provision sealed secrets from an .env file.

Parse the file. Find the recipient's public key. Seal every value.
Nothing leaves the machine in plaintext.
"""

import os

__version__ = "0.1.0"

ENVSEAL_HOME = os.environ.get("ENVSEAL_HOME", "~/.envseal")
