"""Walk through the read-only endpoints with live credentials.

Credentials come from the secrets file or env:
INVESTEC_CLIENT_ID, INVESTEC_CLIENT_SECRET, INVESTEC_API_KEY (and optionally
INVESTEC_HOST, e.g. the sandbox URL).
"""
from __future__ import annotations

import asyncio
import logging

from common.logging import configure_logging
from integrations.investec import InvestecError, InvestecPbApi

_LOG = logging.getLogger("basic_usage")


async def main() -> int:  # noqa: D401
    configure_logging(service_name="investec-basic-usage")
    try:
        async with InvestecPbApi.from_env() as api:
            accounts = await api.get_accounts()
            for acc in accounts.accounts:
                _LOG.info("Account %s %s (%s)", acc.account_id, acc.account_name, acc.product_name)

            if accounts.accounts:
                account_id = accounts.accounts[0].account_id
                balance = await api.get_account_balances(account_id)
                _LOG.info(
                    "Balance: current=%s available=%s %s",
                    balance.data.current_balance,
                    balance.data.available_balance,
                    balance.data.currency,
                )
                txs = await api.get_account_transactions(account_id)
                _LOG.info("Transactions: %d", len(txs.transactions))

            beneficiaries = await api.get_beneficiaries()
            _LOG.info("Beneficiaries: %d (pages=%s)", len(beneficiaries.data), beneficiaries.total_pages)
    except InvestecError as exc:
        _LOG.error("API error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
