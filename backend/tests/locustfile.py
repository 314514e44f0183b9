"""
Locust load test file for the MDView API.
Run with: locust -f tests/locustfile.py --host=http://localhost:8000 --users 100 --spawn-rate 10 --run-time 5m --html report.html
"""

import json

from locust import HttpUser, between, task

SAMPLE_JSON = json.dumps({
    "name": "MDView",
    "users": [{"id": i, "role": "admin" if i % 3 == 0 else "user"} for i in range(50)],
    "tags": ["markdown", "json", "toon"],
})


class MDViewUser(HttpUser):
    """Simulates a user working in the viewer."""

    wait_time = between(1, 3)

    @task(5)
    def json_to_toon(self):
        """TOON conversion - the most common call."""
        self.client.post("/json/toon", json={"content": SAMPLE_JSON})

    @task(3)
    def render_markdown(self):
        self.client.post("/markdown/render", json={"content": "# Title\n\n- one\n- two"})

    @task(2)
    def list_documents(self):
        self.client.get("/documents")

    @task(1)
    def export_current(self):
        response = self.client.get("/documents/current")
        if response.status_code == 200:
            doc_id = response.json()["id"]
            self.client.get(f"/documents/{doc_id}/export", params={"format": "toon"}, name="/documents/[id]/export")

    @task(1)
    def health_check(self):
        self.client.get("/health")

    def on_start(self):
        """Called when a simulated user starts."""
        self.client.post("/documents", json={"name": "Load test", "content": SAMPLE_JSON})
