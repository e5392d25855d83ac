"""
Cobbler: Verification Portfolio for Generated Code Changes.

Decides whether an automatically generated code change should be accepted,
sent to mend for automated repair, or escalated to a human. Independent
verification techniques (translation validation, mutation testing, ...)
each produce a typed result; a composite scorer turns those results into
one weighted, threshold-gated decision.

Example:
    from cobbler.config import load_config_from_env
    from cobbler.portfolio import build_portfolio
    from cobbler.verification import InspectInput

    portfolio = build_portfolio(load_config_from_env())
    composite = portfolio.inspect(
        InspectInput(
            crumb_id="crumb-42",
            work_type="code",
            modified_files=["src/pkg/module.py"],
            modified_packages=["src/pkg"],
            prd_criteria=["AC1: module exposes parse()"],
        )
    )
    print(composite.action.value)
"""

from cobbler.version import __version__

__all__ = [
    "__version__",
]
