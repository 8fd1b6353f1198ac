import time
import subprocess
import httpx
import sys
import os
import signal
from datetime import date
from decimal import Decimal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def start_server(extra_env=None):
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "bakery_ledger.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, **(extra_env or {})}
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server({"DB_ECHO": "True"})  # Enable echo to see SQL

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Create a customer and record a sale
        print("\n--- [Step 2] Recording Transaction (Persistence Test) ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/entities/customer", json={"name": "Persistence Check Cafe"})
        if resp.status_code != 201:
            print(f"❌ Customer creation failed: {resp.status_code} {resp.text}")
            raise Exception("Customer creation failed")
        customer_id = resp.json()["id"]

        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/ledger", json={
            "entity_type": "customer",
            "entity_id": customer_id,
            "transaction_date": date.today().isoformat(),
            "description": "Persistence check order",
            "transaction_type": "sale",
            "amount": "123.45",
        })
        if resp.status_code != 201:
            print(f"❌ Recording failed: {resp.status_code} {resp.text}")
            raise Exception("Recording failed")
        print("✅ Transaction recorded")
        print(resp.json())

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        # 4. Read the ledger back
        print("\n--- [Step 5] Reading Ledger (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/ledger/customer/{customer_id}")
        if resp.status_code != 200:
            print(f"❌ Ledger read failed (Persistence Issue?): {resp.status_code} {resp.text}")
            raise Exception("Ledger read failed after restart")

        ledger = resp.json()
        if len(ledger["transactions"]) == 1 and Decimal(ledger["current_balance"]) == Decimal("123.45"):
            print("✅ Ledger and balance persisted!")
        else:
            print(f"❌ Unexpected ledger after restart: {ledger}")
            raise Exception("Ledger mismatch after restart")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
