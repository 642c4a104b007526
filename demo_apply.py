#!/usr/bin/env python
"""
Smoke test against a running Job Applier API.

Usage:
    python demo_apply.py [base_url] [job_url]
"""

import json
import sys

import httpx

base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3000"
job_url = sys.argv[2] if len(sys.argv) > 2 else "https://example-job-site.com/apply"

print("=" * 80)
print("JOB APPLIER API SMOKE TEST")
print("=" * 80)
print()

with httpx.Client(base_url=base_url, timeout=120) as client:
    try:
        r = client.get("/health")
        print(f"✓ Health check ({r.status_code}):")
        print(json.dumps(r.json(), indent=2))
    except httpx.HTTPError as e:
        print(f"✗ Health check failed: {e}")
        sys.exit(1)
    print()

    payload = {
        "url": job_url,
        "jobTitle": "Software Engineer",
        "company": "**[Example Company](https://example.com)**",
        "useAI": True,
    }
    print("Apply request:")
    print(json.dumps(payload, indent=2))
    r = client.post("/api/apply", json=payload)
    mark = "✓" if r.status_code == 200 else "✗"
    print(f"{mark} Apply response ({r.status_code}):")
    print(json.dumps(r.json(), indent=2))
