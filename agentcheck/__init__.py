"""
Agent-check sidecar for load balancer health polling.

    agentcheck/
    ├── state.py          # Operational state store (closed vocabulary)
    ├── cpu.py            # psutil idle sampler
    ├── handlers.py       # Report / control per-connection handlers
    ├── server.py         # Accept loops + AgentCheck wiring
    ├── config.py         # Environment configuration
    ├── env_loader.py     # .acenv loader
    ├── client.py         # Protocol client helpers
    ├── logging_utils.py  # JSON logging + counters
    └── run_agent.py      # Process entry point
"""

from agentcheck.state import OperationalState, StateStore

__all__ = ["OperationalState", "StateStore"]
