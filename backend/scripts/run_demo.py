"""
End-to-end payment demo on testnet.

This script runs the complete flow with a REAL payment:
  1. Load the customer key (scripts/demo_accounts.json or PRIVATE_KEY)
  2. List the customer's SUI coins
  3. First-fit selection for price + admin fee
  4. Submit process_widget_payment
  5. Verify: processor stats and the newest PaymentCompleted event

Usage (from backend/):
    python -m scripts.run_demo
"""
import asyncio
import json
import os
import sys
import time

from config import settings
from domain.constants import MIST_PER_SUI
from domain.errors import DomainError
from models import PaymentRequest
from services.funding_service import select_first_fit
from services.payment_service import PaymentOrchestrator
from services.signing import Ed25519Signer
from sui_client import SuiClient

ACCOUNTS_PATH = os.path.join(os.path.dirname(__file__), "demo_accounts.json")
EXPLORER = "https://testnet.suivision.xyz/txblock"


def section(title):
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


def load_customer() -> Ed25519Signer:
    if os.path.exists(ACCOUNTS_PATH):
        with open(ACCOUNTS_PATH) as f:
            accounts = json.load(f)
        return Ed25519Signer.from_base64(accounts["customer"]["private_key"])
    if settings.private_key:
        return Ed25519Signer.from_base64(settings.private_key)
    raise SystemExit("No customer key: run scripts.generate_accounts or set PRIVATE_KEY")


async def main() -> int:
    config = settings.processor_config()
    customer = load_customer()
    merchant_address = os.environ.get(
        "DEMO_MERCHANT_ADDRESS",
        "0x1234567890123456789012345678901234567890123456789012345678901234",
    )

    async with SuiClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds) as client:
        orchestrator = PaymentOrchestrator(client, config, settings.admin_signer)

        section("1. Customer holdings")
        print(f"  Customer: {customer.address}")
        units = await orchestrator.list_funding_units(customer.address)
        total = sum(u.balance for u in units)
        print(f"  {len(units)} coin(s), total {total / MIST_PER_SUI} SUI")

        section("2. Coin selection")
        required = config.required_amount()
        print(f"  Price:     {config.payment_amount / MIST_PER_SUI} SUI")
        print(f"  Admin fee: {config.admin_fee / MIST_PER_SUI} SUI")
        unit = select_first_fit(units, required, customer.address)
        print(f"  Selected {unit.id} ({unit.balance / MIST_PER_SUI} SUI)")

        section("3. Payment")
        stamp = int(time.time())
        request = PaymentRequest(
            merchant_address=merchant_address,
            merchant_id=f"demo_merchant_{stamp}",
            product_id=f"demo_product_{stamp}",
            funding_unit_id=unit.id,
        )
        print("  This spends real testnet SUI (price + admin fee + gas).")
        print("  Press Ctrl+C within 5 seconds to cancel...")
        await asyncio.sleep(5)
        result = await orchestrator.process_payment(request, customer)
        print(f"  Digest:   {result.transaction_digest}")
        print(f"  Explorer: {EXPLORER}/{result.transaction_digest}")

        section("4. Verification")
        stats = await orchestrator.get_contract_stats()
        print(f"  Total payments: {stats.total_payments_processed}")
        print(f"  Fees collected: {stats.total_fees_collected} MIST")
        events = await orchestrator.get_payment_events(1)
        if events and events[0].transaction_digest == result.transaction_digest:
            data = events[0].data
            print(f"  Event: total={data.total_amount} merchant={data.merchant_received} fee={data.admin_fee}")
            print(f"  Reconciles: {data.reconciles}")
        else:
            print("  Newest event is not this payment yet (indexer lag); re-run check_connection later")

    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except DomainError as e:
        print(f"\nDemo failed [{e.code}] (funds: {e.funds.value}): {e.message}")
        sys.exit(1)
