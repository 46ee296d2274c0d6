"""Phase-one research agents that each cast an independent vote."""

from .investigator_agent import InvestigatorAgent
from .research_agent import ResearchAgent
from .skeptic_agent import CROSS_CHECK_AGENT_NAME, SKEPTIC_AGENT_NAME, SkepticAgent
from .web_fact_check_agent import WebFactCheckAgent

__all__ = [
    "CROSS_CHECK_AGENT_NAME",
    "SKEPTIC_AGENT_NAME",
    "InvestigatorAgent",
    "ResearchAgent",
    "SkepticAgent",
    "WebFactCheckAgent",
]
