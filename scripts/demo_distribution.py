#!/usr/bin/env python3
"""Demo: one lead list spread round-robin across three agents.

Runs against a throwaway database in a temporary directory. Install the
package first (``pip install -e .``).
"""

import asyncio
import tempfile
from collections import Counter
from dataclasses import replace
from pathlib import Path

from leadflow.api.deps import build_services
from leadflow.utils.config import get_config

LEADS = b"""FirstName,Phone,Notes,Status,Priority
Ann,555-0100,Asked for a callback,new,high
Ben,555-0101,,open,
Cat,555-0102,Met at the expo,in progress,low
Dan,555-0103,,done,urgent
Eve,555-0104,Referral from Ann,,normal
"""


async def main():
    with tempfile.TemporaryDirectory() as tmp:
        config = replace(
            get_config(),
            db_path=Path(tmp) / "demo.db",
            upload_dir=Path(tmp) / "uploads",
            password_iterations=1000,
        )
        services = await build_services(config)
        try:
            print("=" * 60)
            print("Leadflow Distribution Demo")
            print("=" * 60)

            for name in ("Alice", "Bob", "Carol"):
                agent = await services.agents.create(
                    name, f"{name.lower()}@example.com", "+15550000", "demo-password"
                )
                print(f"Registered {agent.name} <{agent.email}>")

            result = await services.uploads.ingest("leads.csv", "text/csv", LEADS)
            print(f"\nDistributed {result.report.distributed_count} lead(s) "
                  f"from {result.upload.original_name} ({result.report.outcome.value})\n")

            tasks = await services.tasks.list_all()
            for task in reversed(tasks):
                print(f"  {task.first_name:<5} {task.phone:<10} {task.status.value:<12} "
                      f"{task.priority.value:<7} -> {task.agent.name}")

            counts = Counter(task.agent.name for task in tasks)
            print(f"\nPer agent: {dict(counts)}")
        finally:
            await services.db.close()


if __name__ == "__main__":
    asyncio.run(main())
