from .summary import chain_table, ik_results_table, print_chain_summary, print_ik_summary

__all__ = [
    "chain_table",
    "ik_results_table",
    "print_chain_summary",
    "print_ik_summary",
]
