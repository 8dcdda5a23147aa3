from binr.core.orchestration.orchestrator import Orchestrator, get, path  # noqa: F401
