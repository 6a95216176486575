"""Live check — tip jar client against a running dev node."""

import asyncio
import os
import sys

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tipjar import ChainGateway, JsonRpcProvider, TipJarError, ViewController

CONTRACT = os.environ.get("TIPJAR_CONTRACT_ADDRESS", "")
RPC_URL = os.environ.get("TIPJAR_RPC_URL", "http://127.0.0.1:8545")
CHAIN_ID = int(os.environ.get("TIPJAR_CHAIN_ID", "31337"))

passed = 0
failed = 0

def check(condition, msg):
    global passed, failed
    if condition:
        print(f"  PASS: {msg}")
        passed += 1
    else:
        print(f"  FAIL: {msg}")
        failed += 1


async def main():
    provider = JsonRpcProvider(RPC_URL)
    gateway = ChainGateway(provider, CONTRACT, CHAIN_ID, receipt_timeout=30)

    print("\n=== Network ===")
    info = await gateway.get_session_info()
    check(info is not None, f"Session discovered: {info}")
    try:
        await gateway.ensure_expected_network()
        check(True, f"On chain {CHAIN_ID}")
    except TipJarError as e:
        check(False, str(e))

    print("\n=== Reads ===")
    check(await gateway.contract_exists(), f"Contract deployed at {CONTRACT}")
    balance = await gateway.read_balance()
    check(balance.count(".") == 1 and len(balance.split(".")[1]) == 4, f"Balance: {balance} ETH")
    owner = await gateway.read_owner()
    check(owner.startswith("0x"), f"Owner: {owner}")

    print("\n=== Tip ===")
    async with ViewController(gateway) as view:
        account = await view.connect()
        check(account is not None, f"Connected: {account}")
        tx_hash = await view.send_tip("0.001")
        check(tx_hash is not None, f"Tip tx: {tx_hash or view.state.error}")
        check(view.snapshot is not None, f"Balance after tip: {view.snapshot.balance if view.snapshot else '-'}")
        check(not view.state.pending.pending, "Pending cleared")

        print("\n=== Withdraw ===")
        if view.state.is_owner:
            tx_hash = await view.withdraw()
            check(tx_hash is not None, f"Withdraw tx: {tx_hash or view.state.error}")
        else:
            check(await view.withdraw() is None, "Non-owner withdraw refused locally")

    await provider.close()

    print(f"\n{'='*50}")
    print(f"Results: {passed} passed, {failed} failed out of {passed + failed}")
    print("=" * 50)
    sys.exit(1 if failed > 0 else 0)


asyncio.run(main())
