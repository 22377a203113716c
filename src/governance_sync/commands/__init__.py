"""Command handlers for the governance sync CLI."""

from governance_sync.commands.cache_health import run_cache_health
from governance_sync.commands.evaluate_eligibility import run_evaluate_eligibility
from governance_sync.commands.get_proposal import run_get_proposal
from governance_sync.commands.governance_parameters import run_governance_parameters
from governance_sync.commands.invalidate_cache import run_invalidate_cache
from governance_sync.commands.list_proposals import run_list_proposals

__all__ = [
    "run_cache_health",
    "run_evaluate_eligibility",
    "run_get_proposal",
    "run_governance_parameters",
    "run_invalidate_cache",
    "run_list_proposals",
]
