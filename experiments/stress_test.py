#!/usr/bin/env python3
"""
Stress test for duplicate ticket purchases against a running API.

Registers a studio and a handful of dancers, creates one event, then has
every dancer fire many purchase requests for it at the same moment. Each
dancer must end up with exactly one ticket: one 201, the rest 409.
"""

import asyncio
import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import aiohttp

API_URL = "http://localhost:8000"
DANCERS = 10
ATTEMPTS_PER_DANCER = 20
PASSWORD = "stress-test"


class StressTest:
    def __init__(self):
        self.run_id = int(time.time())
        self.statuses: Dict[int, Counter] = {}
        self.response_times: List[float] = []
        self.errors = 0
        self.event_id: Optional[int] = None

    async def register(self, session: aiohttp.ClientSession, label: str, role: str) -> Optional[str]:
        """Register a user and return its token."""
        async with session.post(f"{API_URL}/api/auth/register", json={
            "email": f"{label}_{self.run_id}@stress.test",
            "password": PASSWORD,
            "name": label,
            "role": role,
        }) as resp:
            if resp.status == 201:
                data = await resp.json()
                return data["token"]
            print(f"✗ Register {label} failed: {resp.status}")
        return None

    async def create_event(self, session: aiohttp.ClientSession, token: str):
        start_at = (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()
        async with session.post(
            f"{API_URL}/api/events",
            json={
                "title": f"Stress Test Social {self.run_id}",
                "description": "Concurrent purchase test",
                "location": "Test Studio",
                "startAt": start_at,
                "priceCents": 1500,
            },
            headers={"Authorization": f"Bearer {token}"},
        ) as resp:
            if resp.status == 201:
                data = await resp.json()
                self.event_id = data["id"]
                print(f"✓ Created event {self.event_id}")
            else:
                print(f"✗ Create event failed: {resp.status}")

    async def buy(self, session: aiohttp.ClientSession, token: str, dancer: int):
        headers = {"Authorization": f"Bearer {token}"}
        start = time.perf_counter()
        try:
            async with session.post(
                f"{API_URL}/api/events/{self.event_id}/tickets", headers=headers
            ) as resp:
                self.response_times.append((time.perf_counter() - start) * 1000)
                self.statuses[dancer][resp.status] += 1
        except aiohttp.ClientError as e:
            self.errors += 1
            print(f"✗ Dancer {dancer} error: {e}")

    async def run(self):
        print(f"\n{'='*60}")
        print(f"STRESS TEST: {DANCERS} dancers x {ATTEMPTS_PER_DANCER} purchases of one event")
        print(f"{'='*60}\n")

        async with aiohttp.ClientSession() as session:
            print("Phase 1: Registering users...")
            studio_token = await self.register(session, "studio", "STUDIO")
            tokens = await asyncio.gather(
                *[self.register(session, f"dancer{i}", "DANCER") for i in range(DANCERS)]
            )
            tokens = [t for t in tokens if t]
            if not studio_token or not tokens:
                print("✗ Failed to create users")
                return
            print(f"✓ Registered {len(tokens)} dancers\n")

            print("Phase 2: Creating event...")
            await self.create_event(session, studio_token)
            if not self.event_id:
                return
            print()

            print("Phase 3: Purchasing concurrently...")
            self.statuses = {i: Counter() for i in range(len(tokens))}
            started = time.time()
            await asyncio.gather(*[
                self.buy(session, token, i)
                for i, token in enumerate(tokens)
                for _ in range(ATTEMPTS_PER_DANCER)
            ])
            total_time = time.time() - started

            async with session.get(f"{API_URL}/api/events/{self.event_id}") as resp:
                ticket_count = (await resp.json())["ticketCount"]

        print("\n" + "="*60)
        print("RESULTS")
        print("="*60)
        totals = sum(self.statuses.values(), Counter())
        print(f"Total time:      {total_time:.2f}s")
        print(f"Created (201):   {totals[201]}")
        print(f"Conflicts (409): {totals[409]}")
        print(f"Other statuses:  {sum(v for k, v in totals.items() if k not in (201, 409))}")
        print(f"Errors:          {self.errors}")
        print(f"Ticket count:    {ticket_count}")

        if self.response_times:
            times = sorted(self.response_times)
            print("\nResponse times:")
            print(f"  Avg: {sum(times)/len(times):.0f}ms")
            print(f"  P50: {times[len(times)//2]:.0f}ms")
            print(f"  P95: {times[int(len(times)*0.95)]:.0f}ms")

        duplicated = [i for i, counts in self.statuses.items() if counts[201] > 1]
        print("\n" + "="*60)
        if not duplicated and ticket_count == len(tokens):
            print("✓ PASS: every dancer holds exactly one ticket")
        else:
            print(f"✗ FAIL: duplicates for dancers {duplicated}, ticketCount={ticket_count}")
        print("="*60 + "\n")


if __name__ == "__main__":
    asyncio.run(StressTest().run())
