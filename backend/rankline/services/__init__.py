"""Services Layer — async orchestration of the ordering core over a RankStore.

Invariants:
    - Every service call runs inside the caller's transaction; nothing here commits
    - Services fetch ranks, hand them to core/ for a decision, then write the result
    - The scope lock is taken before any neighbor or boundary rank is read

Design Decisions:
    - One file per component (allocator, resolver, rebalancer, transition) for locality
    - Entry points are explicit before_insert/before_update/before_delete calls made by
      the host persistence layer, not ORM event hooks (ADR: no hidden lifecycle magic)
"""
