"""
Generate Sui demo accounts (Ed25519) and save them to a file.

Usage (from backend/):
    python -m scripts.generate_accounts

Fund the customer account from the testnet faucet before running the demo.
"""
import json
import os

from services.signing import Ed25519Signer

accounts = {}
for role in ["admin", "customer", "merchant"]:
    signer = Ed25519Signer.generate()
    accounts[role] = {"address": signer.address, "private_key": signer.export_base64()}

# Save to file
out_path = os.path.join(os.path.dirname(__file__), "demo_accounts.json")
with open(out_path, "w") as f:
    json.dump(accounts, f, indent=2)

print(f"Accounts saved to: {out_path}")
for role, info in accounts.items():
    print(f"\n{role.upper()}:")
    print(f"  {info['address']}")
print("\nSet PRIVATE_KEY in .env to the admin key to enable fee withdrawal.")
