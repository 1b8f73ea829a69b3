"""
Viewing-session engine.

Includes:
- viewing_domain: ViewingSession runtime (effects, timers, adapters).
- _reducer / viewing_state_machine: pure transitions.
- watch_time_gate: free-tier budget.
- playback, navigation, engagement: stream-scoped components.
"""
