#!/usr/bin/env python
"""
Validate Member Example

Checks one member's fraternal-unit credentials against the portal and,
if they are accepted, downloads the roster export.

Usage:
    ICL_URL=https://portal.example.org/login.aspx python examples/validate_member.py

Requirements:
    - Service installed: pip install -e .
    - Chromium installed: moose-automation install-browsers
"""

import asyncio

from moose_automation.config import configure_logging
from moose_automation.gateway import create_gateway
from moose_automation.models import Credentials


async def main():
    """Validate credentials, then force a sync."""
    configure_logging(verbose=True)
    gateway = create_gateway()

    credentials = Credentials(
        member_id="100200300",
        lastname="Doe",
        fru_number="0042",
        fraternal_unit_passcode="change-me",
    )

    try:
        result = await gateway.validate_credentials(credentials)
        print(f"Validate: [{result.status_code}] {result.message}")

        if result.success:
            result = await gateway.force_sync(credentials)
            print(f"Force sync: [{result.status_code}] {result.message}")
            if result.data:
                print(f"Saved to {result.data['filePath']}")
    finally:
        # Browser stays open between calls; close it once at the end
        await gateway.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
