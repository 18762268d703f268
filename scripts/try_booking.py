#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from typing import Any

import httpx
from httpx import ConnectError


def _show(title: str, resp: httpx.Response) -> dict[str, Any]:
    body = resp.json() if resp.content else {}
    print(f"--- {title} [{resp.status_code}]")
    state = body.get("state") or {}
    print(f"action={body.get('action')} step={state.get('step')} notice={body.get('notice')}")
    return body


def main() -> None:
    parser = argparse.ArgumentParser(description="Walk a booking through the local GeoPress API")
    parser.add_argument("--base-url", default="http://127.0.0.1:8001/api/v1")
    parser.add_argument("--pressing", required=True, help="Pressing id")
    parser.add_argument("--date", required=True, help="Pickup day, YYYY-MM-DD")
    parser.add_argument("--service", default="svc_lavage:Lavage:1500", help="id:name:price")
    parser.add_argument("--street", default="Rue des Jardins, Cocody")
    parser.add_argument("--submit", action="store_true", help="Actually create the appointment")
    args = parser.parse_args()

    service_id, name, price = args.service.split(":")
    client = httpx.Client(base_url=args.base_url, timeout=30.0)

    try:
        started = _show(
            "start",
            client.post(
                "/bookings",
                json={"pressing_id": args.pressing, "services": [{"service_id": service_id, "name": name, "price": float(price)}]},
            ),
        )
    except ConnectError:
        print("Connection refused. Is the FastAPI server running?")
        print("Try: uvicorn geopress.main:app --reload --port 8001")
        return

    session = started["state"]["session_id"]
    dated = _show("date", client.post(f"/bookings/{session}/date", json={"date": args.date}))
    slots = dated["state"]["available_slots"]
    if not slots:
        print("No slot available for this day")
        return

    for slot in slots:
        print(f"  {slot['id']}: {slot['start_time']}-{slot['end_time']} ({slot['available_spots']} places)")

    _show("slot", client.post(f"/bookings/{session}/slot", json={"slot_id": slots[0]["id"]}))
    _show("next", client.post(f"/bookings/{session}/next"))
    _show("address", client.post(f"/bookings/{session}/address", json={"pickup": {"street": args.street}}))
    review = _show("next", client.post(f"/bookings/{session}/next"))
    print(json.dumps(review["state"], indent=2, ensure_ascii=False))

    if args.submit:
        _show("submit", client.post(f"/bookings/{session}/submit"))


if __name__ == "__main__":
    main()
