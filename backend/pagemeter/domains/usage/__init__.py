"""Usage domain: eligibility, atomic charging, and usage history.

Use Inject(ChargeExecutorProtocol) in FastAPI endpoints for the charge executor.
Use Inject(UsageHistoryReaderProtocol) for paginated history and summaries.
The EligibilityEvaluator is advisory; only ChargeExecutor mutates a ledger.
"""
