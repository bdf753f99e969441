"""
Connectivity check against the deployed processor.

Reads the processor statistics and the most recent payment events using the
settings in .env. Nothing is signed or submitted.

Usage (from backend/):
    python -m scripts.check_connection
"""
import asyncio
import sys

from config import settings
from domain.errors import DomainError
from services.payment_service import PaymentOrchestrator
from sui_client import SuiClient


async def main() -> int:
    print("Checking connection to the SuiFlow processor...\n")

    try:
        config = settings.processor_config()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    print(f"1. Network:   {settings.network} ({settings.rpc_url})")
    print(f"   Package:   {config.package_id}")
    print(f"   Processor: {config.processor_object_id}\n")

    async with SuiClient(settings.rpc_url, timeout=settings.rpc_timeout_seconds) as client:
        orchestrator = PaymentOrchestrator(client, config)
        try:
            print("2. Fetching contract statistics...")
            stats = await orchestrator.get_contract_stats()
            print(f"   Admin address:  {stats.admin_address}")
            print(f"   Total payments: {stats.total_payments_processed}")
            print(f"   Fees collected: {stats.total_fees_collected} MIST\n")

            print("3. Fetching recent payment events...")
            events = await orchestrator.get_payment_events(3)
            print(f"   Found {len(events)} recent payment event(s)")
            if not events:
                print("   No payment events yet (normal for a new deployment)")
            for i, event in enumerate(events, 1):
                print(f"   {i}. {event.data.merchant_id} - {event.data.total_amount} MIST")
        except DomainError as e:
            print(f"\nCheck failed [{e.code}]: {e.message}")
            print("\nTroubleshooting:")
            print("  - PACKAGE_ID and PROCESSOR_OBJECT_ID in .env match the deployment")
            print("  - NETWORK (or SUI_RPC_URL) points at the network it was published to")
            return 1

    print("\nConnection OK: the processor is reachable and readable.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
