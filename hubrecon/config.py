#!/usr/bin/env python3

import logging
import os

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "Comparison_Results.xlsx"


class ReconSettings:
    def __init__(self, load_env_file=True, env_path=None):
        """Read settings from the environment, after loading a .env file if present.

        Without ``env_path`` the .env file is searched from the working directory upwards.
        """
        if load_env_file:
            load_dotenv(env_path or find_dotenv(usecwd=True), override=True)

        self.client = os.getenv('RECON_CLIENT') or 'default'
        self.output_file = os.getenv('RECON_OUTPUT') or DEFAULT_OUTPUT_FILE
        self.log_level = (os.getenv('RECON_LOG_LEVEL') or 'INFO').upper()
        self.tolerance = self._parse_tolerance(os.getenv('RECON_TOLERANCE'))

    @staticmethod
    def _parse_tolerance(raw):
        if raw is None or not raw.strip():
            return None
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"⚠ Ignoring RECON_TOLERANCE={raw!r}: not a number")
            return None
        if value <= 0:
            logger.warning(f"⚠ Ignoring RECON_TOLERANCE={raw!r}: must be positive")
            return None
        return value

    def as_dict(self):
        return {
            'client': self.client,
            'output_file': self.output_file,
            'log_level': self.log_level,
            'tolerance': self.tolerance,
        }
