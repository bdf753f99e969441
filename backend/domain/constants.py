"""
Domain constants used across services/routers.
"""

# Move module of the deployed processor contract
PROCESSOR_MODULE = "payment_processor"
PROCESS_PAYMENT_FUNCTION = "process_widget_payment"
WITHDRAW_FEES_FUNCTION = "withdraw_admin_fees"

SUI_COIN_TYPE = "0x2::sui::SUI"
MIST_PER_SUI = 1_000_000_000

# suix_queryEvents / suix_getCoins page size ceiling enforced by full nodes
MAX_RPC_PAGE_SIZE = 50
DEFAULT_EVENT_LIMIT = 10
