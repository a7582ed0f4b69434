"""Services — the imperative shell around core rules.

Invariants:
    - Every service receives its LedgerStore in the constructor
    - Every ledger read/write runs inside LedgerStore.run()

Design Decisions:
    - One module per component: listing manager, settlement engine, market query,
      plus the TransferMarket facade that composes them
"""
