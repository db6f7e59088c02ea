"""Token ledger interface and the ERC20 custody adapter."""
