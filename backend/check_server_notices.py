#!/usr/bin/env python3
"""
Check the notices a process server has served

Compares what the backend reports with what the contract holds and prints the
reconciled view.

Usage:
    python check_server_notices.py TXyz...              # backend + chain, reconciled
    python check_server_notices.py TXyz... --chain-only # contract scan only
    python check_server_notices.py TXyz... --max-id 50  # scan further
"""
import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / '.env')

from config import get_settings, create_backend_http_client, create_tron_http_client
from services.backend_reader import BackendNoticeReader
from services.blockchain_reader import BlockchainNoticeReader
from services.notice_stats import summarize_notices
from services.reconciliation import reconcile
from services.session_cache import SessionCache
from services.tron_client import TronContractClient
from models.notice import Provenance


def print_notices(title, notices):
    print(f"{'='*80}")
    print(f"{title} ({len(notices)})")
    print(f"{'='*80}")
    for n in notices:
        verified = {True: '✅', False: '❓', None: '  '}[n.verified]
        print(
            f" {verified} #{n.notice_id:<5} case={n.case_number:<16} "
            f"{n.status.value:<12} recipient={n.recipient}"
        )
    print()


async def main(args):
    settings = get_settings()
    cache = SessionCache()

    backend_http = create_backend_http_client(settings)
    tron_http = create_tron_http_client(settings)
    try:
        contract = TronContractClient(tron_http, settings.notice_contract_address)
        chain_reader = BlockchainNoticeReader(
            contract,
            cache,
            max_notice_id=args.max_id or settings.max_notice_id,
            query_delay=settings.scan_query_delay,
        )
        scan = await chain_reader.scan(args.address)
        print_notices("⛓️  Chain notices", scan.notices)
        if scan.stopped_by_error:
            print(f"⚠️  Scan stopped early: {scan.stopped_by_error}\n")

        if args.chain_only:
            stats = summarize_notices(scan.notices, Provenance.BLOCKCHAIN, verified=scan.reached_chain)
        else:
            backend_reader = BackendNoticeReader(backend_http, settings.backend_api_url, settings.backend_notice_limit)
            backend_notices = await backend_reader.fetch_from_backend(args.address)
            if backend_notices is None:
                print("⚠️  Backend unavailable\n")
                backend_notices = []
            reconcile(backend_notices, scan.notices)
            print_notices("📥 Backend notices (reconciled)", backend_notices)
            stats = summarize_notices(backend_notices, Provenance.BACKEND, verified=scan.reached_chain)

        print(f"📊 Served: {stats.total_served}  Acknowledged: {stats.acknowledged}  Pending: {stats.pending}")
    finally:
        await backend_http.aclose()
        await tron_http.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Check a process server's notices")
    parser.add_argument("address", help="Server TRON address (T...)")
    parser.add_argument("--chain-only", action="store_true", help="Skip the backend")
    parser.add_argument("--max-id", type=int, default=None, help="Scan ceiling")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    )
    asyncio.run(main(args))
