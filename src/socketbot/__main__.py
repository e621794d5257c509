"""Allow `python -m socketbot` to run the bot."""

import asyncio
import sys

from socketbot.main import main

sys.exit(asyncio.run(main()))
