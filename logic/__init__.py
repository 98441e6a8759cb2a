"""logic — Steering systems package.

Subpackages
-----------
steering/   — force library, behaviour strategies, strategy registry

Top-level modules
-----------------
tick            — per-frame system orchestrator
movement        — ground clamp, force application, Euler integration
perception      — tick snapshots, neighbour / target / obstacle queries
entity_factory  — agent and obstacle creation from TOML data
diagnostics     — DevLog / EventBus helpers
"""
