#!/usr/bin/env python3
"""
Smoke checks against a running transcript API server.

Usage: python3 check_api.py [base_url] [video_id ...]
"""

import sys
import time

import httpx

DEFAULT_URL = "http://localhost:3001"


def section(title):
    print(f"\n{'=' * 60}\n{title}\n{'=' * 60}")


def check_health(client):
    section("Health check")
    data = client.get("/health").json()
    print(f"✓ status={data['status']} environment={data['environment']}")


def check_stats(client):
    section("Server stats")
    limits = client.get("/api/stats").json()["limits"]
    print(f"✓ max videos per bulk: {limits['maxVideosPerBulk']}")
    print(f"✓ concurrent requests: {limits['concurrentRequests']}")
    print(f"✓ rate limit: {limits['rateLimitMaxRequests']} per {limits['rateLimitWindowMs']}ms")


def check_single(client, video_id):
    section(f"Single transcript: {video_id}")
    started = time.time()
    response = client.post("/api/transcript", json={"videoId": video_id})
    data = response.json()

    if data.get("success"):
        preview = data["transcript"][:200].replace("\n", " ")
        print(f"✓ {data['metadata']['segments']} segments in {time.time() - started:.2f}s")
        print(f"  {preview}...")
    else:
        print(f"✗ {response.status_code}: {data.get('error')}")


def check_bulk(client, video_ids):
    section(f"Bulk transcript: {len(video_ids)} videos")
    data = client.post("/api/bulk-transcript", json={"videoIds": video_ids}).json()

    if not data.get("success"):
        print(f"✗ {data.get('error')}")
        return

    for result in data["results"]:
        if result["success"]:
            print(f"✓ {result['videoId']}: {result['metadata']['segments']} segments")
        else:
            print(f"✗ {result['videoId']}: {result['error']}")
    summary = data["summary"]
    print(f"  {summary['successful']}/{summary['total']} ok in {summary['processingTimeMs']}ms")


def check_errors(client):
    section("Error handling")
    response = client.post("/api/transcript", json={})
    print(f"{'✓' if response.status_code == 400 else '✗'} missing videoId -> {response.status_code}")
    response = client.post("/api/transcript", json={"videoId": "invalid_id_12345"})
    print(f"{'✓' if response.status_code in (400, 404) else '✗'} invalid videoId -> {response.status_code}")
    response = client.get("/api/does-not-exist")
    print(f"{'✓' if response.status_code == 404 else '✗'} unknown endpoint -> {response.status_code}")


if __name__ == "__main__":
    base_url = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_URL
    video_ids = sys.argv[2:] or [
        "dQw4w9WgXcQ",      # Rick Roll
        "jNQXAC9IVRw",      # YouTube's first ever video
    ]

    print("YouTube Transcript API checks")
    try:
        with httpx.Client(base_url=base_url, timeout=120.0) as client:
            check_health(client)
            check_stats(client)
            check_single(client, video_ids[0])
            check_bulk(client, video_ids)
            check_errors(client)
    except httpx.ConnectError:
        print(f"✗ Could not connect to {base_url}. Is the server running?")
        sys.exit(1)
