"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test duplicate purchases
  locust -f locustfile.py --tags throughput   # Test listing cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
import uuid
from locust import HttpUser, task, between, tag, events
from datetime import datetime, timezone, timedelta

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None

CITIES = ["NYC", "Berlin", "Buenos Aires", "Havana", "Seoul"]
STYLES = ["Salsa", "Tango", "Bachata", "Kizomba", "Swing"]


def random_email():
    return f"load_{uuid.uuid4().hex[:12]}@test.com"


def register(client, role):
    """Register a fresh user and return auth headers (empty on failure)."""
    resp = client.post("/api/auth/register", json={
        "email": random_email(),
        "password": "test123",
        "name": f"Load {role.title()}",
        "role": role,
    })
    if resp.status_code == 201:
        return {"Authorization": f"Bearer {resp.json()['token']}"}
    return {}


def event_payload():
    start = datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))
    return {
        "title": f"{random.choice(STYLES)} Night {random.randint(1, 10000)}",
        "description": "Load test event",
        "location": random.choice(CITIES),
        "startAt": start.isoformat(),
        "endAt": (start + timedelta(hours=4)).isoformat(),
        "priceCents": random.choice([0, 1000, 1500, 2500]),
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "="*60)
    print("SETUP: First concurrency user creates the shared event...")
    print("="*60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - every dancer hammers the same event

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify no dancer holds two tickets:
      SELECT user_id, COUNT(*) FROM tickets WHERE event_id = X
      GROUP BY user_id HAVING COUNT(*) > 1;
    Should return no rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if not CONCURRENCY_EVENT_ID:
            studio_headers = register(self.client, "STUDIO")
            if studio_headers:
                resp = self.client.post("/api/events", json=event_payload(), headers=studio_headers)
                if resp.status_code == 201:
                    globals()["CONCURRENCY_EVENT_ID"] = resp.json()["id"]
                    print(f"\n✓ Created event {CONCURRENCY_EVENT_ID}\n")
        self.headers = register(self.client, "DANCER")

    @tag("concurrency")
    @task
    def buy_same_ticket(self):
        """First purchase wins, every repeat is a conflict."""
        if not CONCURRENCY_EVENT_ID or not self.headers:
            return

        with self.client.post(f"/api/events/{CONCURRENCY_EVENT_ID}/tickets",
            headers=self.headers,
            name="/api/events/{id}/tickets",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: already owned
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: Stop Redis, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        page = random.randint(1, 5)
        self.client.get(f"/api/events?page={page}&limit=20",
            name="/api/events [cached]")

    @tag("throughput", "read")
    @task(5)
    def search_events(self):
        """Filtered listings get their own cache keys."""
        params = {"city": random.choice(CITIES), "maxPrice": random.choice([1000, 2500])}
        if random.random() < 0.5:
            params["q"] = random.choice(STYLES)
        self.client.get("/api/events", params=params, name="/api/events [filtered]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        """Read individual events."""
        if EVENT_IDS:
            event_id = random.choice(EVENT_IDS)
            self.client.get(f"/api/events/{event_id}",
                name="/api/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        """Monitor system health."""
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register(self.client, "DANCER")
        self.studio_headers = register(self.client, "STUDIO")

    def expect(self, resp, *codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_event(self):
        """Buy a ticket for a non-existent event."""
        with self.client.post("/api/events/999999999/tickets",
            headers=self.headers,
            name="/api/events/{missing}/tickets",
            catch_response=True
        ) as resp:
            self.expect(resp, 404)

    @tag("edge")
    @task
    def non_numeric_event_id(self):
        with self.client.get("/api/events/not-a-number",
            name="/api/events/{bad}",
            catch_response=True
        ) as resp:
            self.expect(resp, 400)

    @tag("edge")
    @task
    def negative_price(self):
        payload = event_payload()
        payload["priceCents"] = -500
        with self.client.post("/api/events",
            json=payload,
            headers=self.studio_headers,
            catch_response=True
        ) as resp:
            self.expect(resp, 400)

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post("/api/events",
            data="not json at all",
            headers={**self.studio_headers, "Content-Type": "application/json"},
            catch_response=True
        ) as resp:
            self.expect(resp, 400)

    @tag("edge")
    @task
    def dancer_creates_event(self):
        with self.client.post("/api/events",
            json=event_payload(),
            headers=self.headers,
            catch_response=True
        ) as resp:
            self.expect(resp, 403)

    @tag("edge")
    @task
    def missing_auth(self):
        """Try buying without auth."""
        with self.client.post("/api/events/1/tickets",
            name="/api/events/{id}/tickets [anonymous]",
            catch_response=True
        ) as resp:
            self.expect(resp, 401)


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some purchases and ticket checks
      - Rare creates by organizers
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.role = "STUDIO" if random.random() < 0.1 else "DANCER"
        self.headers = register(self.client, self.role)

    @task(50)
    def browse_events(self):
        """Most common: browsing."""
        resp = self.client.get("/api/events?page=1&limit=20")
        if resp.status_code == 200:
            for event in resp.json().get("items", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        """View details."""
        if EVENT_IDS:
            self.client.get(f"/api/events/{random.choice(EVENT_IDS)}",
                name="/api/events/{id}")

    @task(10)
    def buy_ticket(self):
        """Occasional purchase; repeats are conflicts."""
        if EVENT_IDS and self.headers and self.role == "DANCER":
            with self.client.post(f"/api/events/{random.choice(EVENT_IDS)}/tickets",
                headers=self.headers,
                name="/api/events/{id}/tickets",
                catch_response=True
            ) as resp:
                if resp.status_code in (201, 409):
                    resp.success()

    @task(5)
    def my_tickets(self):
        if self.headers and self.role == "DANCER":
            self.client.get("/api/events/me/tickets", headers=self.headers)

    @task(3)
    def create_event(self):
        """Rare: create new event."""
        if self.headers and self.role == "STUDIO":
            resp = self.client.post("/api/events", json=event_payload(), headers=self.headers)
            if resp.status_code == 201:
                EVENT_IDS.append(resp.json()["id"])
