#!/usr/bin/env python3
"""
Boardwatch Quickstart — subscribe, fire a board event, see who gets notified.

Subscribes two sessions → posts a Planka-style cardUpdate webhook →
lists the live subscribers of each affected resource → drops a session.
Run with: python examples/quickstart.py

Requires: pip install -e .
Backend must be running with BOARDWATCH_SUBSCRIPTIONS_ENABLED=true:
    uvicorn boardwatch.main:app --port 8000
Start a dispatcher alongside it to see the notifications in its log:
    boardwatch-dispatcher
"""

import json
import os
import sys
import uuid

import httpx

from boardwatch.events.uris import board_uri, card_uri, list_cards_uri
from boardwatch.services.webhook_service import sign

BASE = "http://localhost:8000/api/v1"


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        sys.exit(1)
    health = resp.json()
    print(f"  Redis: {'✓' if health['redis'] == 'ok' else '✗'}")

    board, card = f"b-{run_id}", f"c-{run_id}"
    alice, bob = f"alice-{run_id}", f"bob-{run_id}"

    # ── Subscribe ─────────────────────────────────────────────────
    print("\n1. Subscribing sessions...")
    watches = [
        (alice, board_uri(board)),
        (alice, list_cards_uri(f"l1-{run_id}")),
        (bob, card_uri(card)),
    ]
    for session_id, uri in watches:
        resp = client.put(f"/sessions/{session_id}/subscriptions", json={"uri": uri})
        assert resp.status_code == 200, f"Failed: {resp.text}"
        print(f"   {session_id} → {uri}")

    # ── Fire a card move ──────────────────────────────────────────
    print("\n2. Posting cardUpdate webhook (card moved l1 → l2)...")
    body = json.dumps({
        "type": "cardUpdate",
        "data": {
            "boardId": board,
            "listId": f"l2-{run_id}",
            "prevListId": f"l1-{run_id}",
            "item": {"id": card},
        },
    }).encode()
    headers = {"Content-Type": "application/json"}
    secret = os.environ.get("BOARDWATCH_WEBHOOK_SECRET")
    if secret:
        headers["X-Webhook-Signature"] = sign(secret, body)
    resp = client.post("/webhooks/planka", content=body, headers=headers)
    assert resp.status_code == 200, f"Failed: {resp.text}"
    event = resp.json()
    print(f"   {event['status']} — affects {len(event['uris'])} resources")

    # ── Who would be notified? ────────────────────────────────────
    print("\n3. Live subscribers per affected resource...")
    for uri in event["uris"]:
        sessions = client.get("/subscribers", params={"uri": uri}).json()["sessions"]
        print(f"   {uri}: {', '.join(sessions) or '—'}")

    # ── Disconnect ────────────────────────────────────────────────
    print("\n4. Dropping alice's session...")
    resp = client.delete(f"/sessions/{alice}")
    print(f"   Removed {resp.json()['removed']} subscriptions")
    client.delete(f"/sessions/{bob}")

    print("\nDone.")


if __name__ == "__main__":
    main()
